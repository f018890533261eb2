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

from y2storage.common.types import FsType, PartitionId
from y2storage.models.filesystem import Devicegraph, Partition

log = logging.getLogger("y2storage.proposal.analyzer")


class DiskAnalyzer(abc.ABC):
    """Read-only questions the proposal asks about the existing disks.

    Each method takes the name of a disk and returns the names of the
    partitions on it that already fulfil a boot related role.
    """

    @abc.abstractmethod
    def efi_partitions(self, disk: str) -> List[str]:
        pass

    @abc.abstractmethod
    def prep_partitions(self, disk: str) -> List[str]:
        pass

    @abc.abstractmethod
    def existing_boot_partitions(self, disk: str) -> List[str]:
        pass


def is_esp(partition: Partition) -> bool:
    if partition.id == PartitionId.ESP:
        return True
    disk = partition.disk
    if disk is None or disk.partition_table != "gpt":
        return False
    return partition.flag == "boot" and partition.file_system == FsType.VFAT


def is_prep(partition: Partition) -> bool:
    return partition.id == PartitionId.PREP


def is_zipl(partition: Partition) -> bool:
    if partition.file_system not in (FsType.EXT2, FsType.EXT3, FsType.EXT4):
        return False
    return partition.mount_point == "/boot/zipl" or partition.label == "zipl"


class DevicegraphAnalyzer(DiskAnalyzer):
    def __init__(self, devicegraph: Devicegraph):
        self.devicegraph = devicegraph

    def _matching(self, disk, predicate):
        parts = self.devicegraph.find_disk(disk).partitions()
        names = [p.name for p in parts if predicate(p)]
        log.debug("%s on %s: %s", predicate.__name__, disk, names)
        return names

    def efi_partitions(self, disk):
        return self._matching(disk, is_esp)

    def prep_partitions(self, disk):
        return self._matching(disk, is_prep)

    def existing_boot_partitions(self, disk):
        return self._matching(disk, is_zipl)
