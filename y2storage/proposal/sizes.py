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

import enum
from typing import Optional

import attr

from y2storage.common.types import (
    ArchFamily,
    Firmware,
    FsType,
    PartitionId,
    PlatformFlavor,
    ProposalKind,
    VolumeSpecification,
)
from y2storage.models.filesystem import GiB, KiB, MiB, TiB


class VolumeRole(enum.Enum):
    EFI = "efi"
    PREP = "prep"
    ZIPL = "zipl"
    BOOT = "boot"


@attr.s(auto_attribs=True, frozen=True)
class BootVolume:
    mount_point: Optional[str]
    filesystem_type: Optional[FsType]
    partition_id: PartitionId
    min_size: int
    desired_size: int
    max_size: Optional[int] = None
    max_start_offset: Optional[int] = None
    # whether the firmware or the boot loader looks for it on the boot disk
    on_root_device: bool = False

    def volume(self, root_device: str) -> VolumeSpecification:
        return VolumeSpecification(
            mount_point=self.mount_point,
            filesystem_type=self.filesystem_type,
            partition_id=self.partition_id,
            min_size=self.min_size,
            desired_size=self.desired_size,
            max_size=self.max_size,
            max_start_offset=self.max_start_offset,
            can_live_on_logical_volume=False,
            disk=root_device if self.on_root_device else None,
        )


# UEFI firmware often cannot address partitions starting beyond 2 TiB.
EFI_MAX_START_OFFSET = 2 * TiB
# Open Firmware only reads the PReP partition from the first 4 GiB.
PREP_MAX_END = 4 * GiB
PREP_MAX_SIZE = 8 * MiB

BOOT_VOLUMES = {
    VolumeRole.EFI: BootVolume(
        mount_point="/boot/efi",
        filesystem_type=FsType.VFAT,
        partition_id=PartitionId.ESP,
        min_size=33 * MiB,
        desired_size=500 * MiB,
        max_start_offset=EFI_MAX_START_OFFSET,
    ),
    VolumeRole.PREP: BootVolume(
        mount_point=None,
        filesystem_type=None,
        partition_id=PartitionId.PREP,
        min_size=256 * KiB,
        desired_size=1 * MiB,
        max_size=PREP_MAX_SIZE,
        max_start_offset=PREP_MAX_END - PREP_MAX_SIZE,
        on_root_device=True,
    ),
    VolumeRole.ZIPL: BootVolume(
        mount_point="/boot/zipl",
        filesystem_type=FsType.EXT2,
        partition_id=PartitionId.LINUX,
        min_size=100 * MiB,
        desired_size=200 * MiB,
        max_size=1 * GiB,
        on_root_device=True,
    ),
    VolumeRole.BOOT: BootVolume(
        mount_point="/boot",
        filesystem_type=FsType.EXT4,
        partition_id=PartitionId.LINUX,
        min_size=100 * MiB,
        desired_size=200 * MiB,
        max_size=500 * MiB,
        on_root_device=True,
    ),
}


def _by_kind(partitions, volume_managed):
    # An encrypted root hides the kernel from the boot loader just like
    # LVM does, so both need the same extra volumes.
    return {
        ProposalKind.PARTITIONS: partitions,
        ProposalKind.LVM: volume_managed,
        ProposalKind.ENCRYPTED: volume_managed,
    }


_EFI = VolumeRole.EFI
_PREP = VolumeRole.PREP
_ZIPL = VolumeRole.ZIPL
_BOOT = VolumeRole.BOOT

_roles_by_platform = {
    (ArchFamily.X86, Firmware.UEFI): _by_kind((_EFI,), (_EFI, _BOOT)),
    (ArchFamily.X86, Firmware.BIOS): _by_kind((), (_BOOT,)),
    (ArchFamily.PPC, PlatformFlavor.KVM): _by_kind((_PREP,), (_PREP, _BOOT)),
    (ArchFamily.PPC, PlatformFlavor.LPAR): _by_kind((_PREP,), (_PREP, _BOOT)),
    (ArchFamily.PPC, PlatformFlavor.UNKNOWN): _by_kind((_PREP,), (_PREP, _BOOT)),
    # petitboot replaces grub stage 1 but reads the kernel from /boot
    (ArchFamily.PPC, PlatformFlavor.BARE_METAL): _by_kind((_BOOT,), (_BOOT,)),
    (ArchFamily.S390, Firmware.NONE): _by_kind((_ZIPL,), (_ZIPL,)),
}

BOOT_ROLES = {
    (family, platform, kind): roles
    for (family, platform), kinds in _roles_by_platform.items()
    for kind, roles in kinds.items()
}


def roles_for(family, platform, kind):
    """Return the boot volume roles needed before looking at the disk."""
    return BOOT_ROLES.get((family, platform, kind), ())
