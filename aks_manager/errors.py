# /*
# Copyright 2026 The AKS Manager Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Exceptions raised by handlers and reported by the dispatcher."""

from __future__ import annotations


class AksManagerError(RuntimeError):
    """Base class for failures reported as a message and exit status 1."""


class DependencyError(AksManagerError):
    """A required external tool is missing or too old."""


class ResourceNotFoundError(AksManagerError):
    """The Azure resource a handler inspects does not exist."""


class ConfigFileNotFoundError(AksManagerError):
    """A local file a handler needs has not been generated yet."""
