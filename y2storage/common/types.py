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

# This module defines types that are shared between the proposal code, the
# device models and the command line tool.

import enum
from typing import Optional

import attr


class ArchFamily(enum.Enum):
    X86 = "x86"
    PPC = "ppc"
    S390 = "s390"
    OTHER = "other"


class PlatformFlavor(enum.Enum):
    KVM = "kvm"  # PowerKVM / qemu guest, grub in a PReP partition
    LPAR = "lpar"  # PowerVM logical partition, grub in a PReP partition
    BARE_METAL = "bare_metal"  # PowerNV, petitboot in firmware
    UNKNOWN = "unknown"


class Firmware(enum.Enum):
    UEFI = "UEFI"
    BIOS = "BIOS"
    NONE = "NONE"  # firmware is not relevant for the rules of the arch


class ProposalKind(enum.Enum):
    PARTITIONS = "partitions"
    LVM = "lvm"
    ENCRYPTED = "encrypted"  # plain partitions, root inside LUKS


class FsType(enum.Enum):
    VFAT = "vfat"
    EXT2 = "ext2"
    EXT3 = "ext3"
    EXT4 = "ext4"
    BTRFS = "btrfs"
    XFS = "xfs"
    SWAP = "swap"
    NTFS = "ntfs"


class PartitionId(enum.Enum):
    NTFS = 0x07
    DOS32 = 0x0C
    PREP = 0x41
    SWAP = 0x82
    LINUX = 0x83
    LVM = 0x8E
    ESP = 0xEF
    BIOS_BOOT = 0x101


def _min_le_desired(inst, field, desired_size):
    if inst.min_size > desired_size:
        raise ValueError(
            f"desired_size {desired_size} is smaller than min_size {inst.min_size}"
        )


def _desired_le_max(inst, field, max_size):
    if max_size is not None and inst.desired_size > max_size:
        raise ValueError(
            f"max_size {max_size} is smaller than desired_size {inst.desired_size}"
        )


@attr.s(auto_attribs=True, frozen=True)
class VolumeSpecification:
    """A volume the partitioning proposal has to create.

    Sizes are in bytes. A volume that cannot live on a logical volume
    must be created as a plain partition, outside of any LVM volume
    group. When `disk` is set, the partition has to be created on that
    disk.
    """

    mount_point: Optional[str]
    filesystem_type: Optional[FsType]
    min_size: int
    desired_size: int = attr.ib(validator=_min_le_desired)
    max_size: Optional[int] = attr.ib(default=None, validator=_desired_le_max)
    max_start_offset: Optional[int] = None
    partition_id: Optional[PartitionId] = None
    can_live_on_logical_volume: bool = True
    disk: Optional[str] = None
