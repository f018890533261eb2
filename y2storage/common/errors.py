# Copyright 2024 Canonical, Ltd.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from typing import Optional


class StorageError(Exception):
    def __init__(self, message: str, *, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self):
        if self.details is None:
            return self.message
        return f"{self.message}: {self.details}"


class DeviceNotFoundError(StorageError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"device {name!r} not found")


class BootRequirementsError(StorageError):
    """The boot requirements could not be computed."""

    def __init__(self, disk: str, details: Optional[str] = None):
        self.disk = disk
        super().__init__(
            f"cannot compute boot requirements for {disk!r}", details=details
        )


class ConfigValidationError(StorageError):
    def __init__(self, owner: str, details: Optional[str] = None):
        self.owner = owner
        super().__init__(f"Malformed {owner}", details=details)
