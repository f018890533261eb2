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

import logging
import os
import platform
from typing import Optional

import attr

from y2storage.common.types import ArchFamily, PlatformFlavor

log = logging.getLogger("y2storage.models.arch")


def family_for_machine(machine: str) -> ArchFamily:
    if machine == "x86_64" or machine in ("i386", "i486", "i586", "i686"):
        return ArchFamily.X86
    elif machine.startswith("ppc64"):
        return ArchFamily.PPC
    elif machine.startswith("s390"):
        return ArchFamily.S390
    else:
        return ArchFamily.OTHER


def flavor_from_cpuinfo(cpuinfo: str) -> PlatformFlavor:
    """Work out the POWER platform flavor from /proc/cpuinfo contents.

    PowerNV reports "platform : PowerNV". Guests and LPARs both report
    "platform : pSeries", but a qemu guest says so in its "model" line.
    """
    fields = {}
    for line in cpuinfo.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        fields.setdefault(key.strip().lower(), value.strip())
    plat = fields.get("platform", "")
    if plat == "PowerNV":
        return PlatformFlavor.BARE_METAL
    elif plat == "pSeries":
        if "qemu" in fields.get("model", "").lower():
            return PlatformFlavor.KVM
        return PlatformFlavor.LPAR
    else:
        return PlatformFlavor.UNKNOWN


@attr.s(auto_attribs=True, frozen=True)
class Arch:
    family: ArchFamily
    efiboot: bool = False
    flavor: PlatformFlavor = PlatformFlavor.UNKNOWN

    def is_x86(self):
        return self.family == ArchFamily.X86

    def is_ppc(self):
        return self.family == ArchFamily.PPC

    def is_s390(self):
        return self.family == ArchFamily.S390

    def is_uefi_boot(self):
        return self.efiboot

    def platform_flavor(self):
        return self.flavor

    @classmethod
    def probe(cls, root: str = "/", machine: Optional[str] = None) -> "Arch":
        if machine is None:
            machine = platform.machine()
        family = family_for_machine(machine)
        efiboot = os.path.exists(os.path.join(root, "sys/firmware/efi"))
        flavor = PlatformFlavor.UNKNOWN
        if family == ArchFamily.PPC:
            try:
                with open(os.path.join(root, "proc/cpuinfo")) as fp:
                    flavor = flavor_from_cpuinfo(fp.read())
            except FileNotFoundError:
                log.debug("no cpuinfo under %s, platform flavor unknown", root)
        arch = cls(family=family, efiboot=efiboot, flavor=flavor)
        log.debug("probed %s on machine %r", arch, machine)
        return arch
