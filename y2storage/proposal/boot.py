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

import abc
import logging
from typing import List

from y2storage.common.errors import BootRequirementsError, StorageError
from y2storage.common.types import (
    ArchFamily,
    Firmware,
    PlatformFlavor,
    VolumeSpecification,
)
from y2storage.proposal import sizes
from y2storage.proposal.settings import proposal_kind
from y2storage.proposal.sizes import VolumeRole

log = logging.getLogger("y2storage.proposal.boot")


def existing_partitions(role, analyzer, disk):
    """Partitions of `disk` that can be reused for `role`."""
    if role == VolumeRole.EFI:
        return analyzer.efi_partitions(disk)
    elif role == VolumeRole.PREP:
        return analyzer.prep_partitions(disk)
    elif role == VolumeRole.ZIPL:
        return analyzer.existing_boot_partitions(disk)
    else:
        return []


class BootStrategy(abc.ABC):
    """The boot rules of one architecture family.

    A strategy looks up which volumes its platform needs for the kind of
    proposal being made and then drops those the disk already has. The
    arch facts are asked for again on every call.
    """

    family: ArchFamily

    def __init__(self, arch):
        self.arch = arch

    @abc.abstractmethod
    def platform(self):
        """The firmware or platform flavor the rule table is keyed on."""

    def needed_partitions(self, settings, analyzer) -> List[VolumeSpecification]:
        platform = self.platform()
        kind = proposal_kind(settings)
        roles = sizes.roles_for(self.family, platform, kind)
        log.debug(
            "%s %s %s proposal needs %s",
            self.family.value,
            platform,
            kind.value,
            [role.value for role in roles],
        )
        volumes = []
        for role in roles:
            existing = existing_partitions(role, analyzer, settings.root_device)
            if existing:
                log.debug("reusing %s for %s", existing, role.value)
                continue
            volumes.append(sizes.BOOT_VOLUMES[role].volume(settings.root_device))
        return volumes


class X86Strategy(BootStrategy):
    family = ArchFamily.X86

    def platform(self):
        if self.arch.is_uefi_boot():
            return Firmware.UEFI
        return Firmware.BIOS


class PPCStrategy(BootStrategy):
    family = ArchFamily.PPC

    def platform(self):
        flavor = self.arch.platform_flavor()
        if not isinstance(flavor, PlatformFlavor):
            try:
                flavor = PlatformFlavor(flavor)
            except ValueError:
                log.debug("unknown platform flavor %r", flavor)
                flavor = PlatformFlavor.UNKNOWN
        return flavor


class S390Strategy(BootStrategy):
    family = ArchFamily.S390

    def platform(self):
        return Firmware.NONE


class GenericStrategy(BootStrategy):
    family = ArchFamily.OTHER

    def platform(self):
        return Firmware.NONE

    def needed_partitions(self, settings, analyzer):
        log.debug("no boot requirements known for %s", self.arch)
        return []


def get_boot_strategy(arch) -> BootStrategy:
    if arch.is_x86():
        return X86Strategy(arch)
    if arch.is_ppc():
        return PPCStrategy(arch)
    if arch.is_s390():
        return S390Strategy(arch)
    return GenericStrategy(arch)


class BootRequirementsChecker:
    """Works out the volumes needed to make a proposal bootable.

    `settings` describes the proposal (root disk, LVM, encryption),
    `analyzer` answers questions about the partitions already present
    and `arch` about the machine. None of them are modified.
    """

    def __init__(self, settings, analyzer, arch):
        self.settings = settings
        self.analyzer = analyzer
        self.arch = arch
        self.strategy = get_boot_strategy(arch)

    def needed_partitions(self) -> List[VolumeSpecification]:
        try:
            volumes = self.strategy.needed_partitions(self.settings, self.analyzer)
        except (StorageError, OSError) as original_exception:
            raise BootRequirementsError(
                self.settings.root_device, details=str(original_exception)
            ) from original_exception
        log.debug(
            "needed boot volumes for %s: %s", self.settings.root_device, volumes
        )
        return volumes
