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

import unittest

from y2storage.common.types import (
    ArchFamily,
    Firmware,
    PlatformFlavor,
    ProposalKind,
)
from y2storage.proposal.sizes import (
    BOOT_ROLES,
    BOOT_VOLUMES,
    VolumeRole,
    roles_for,
)


class TestBootVolumes(unittest.TestCase):
    def test_every_role_has_a_volume(self):
        self.assertEqual(set(VolumeRole), set(BOOT_VOLUMES))

    def test_volume_pinning(self):
        for role, template in BOOT_VOLUMES.items():
            with self.subTest(role=role):
                vol = template.volume("/dev/vdb")
                if role == VolumeRole.EFI:
                    self.assertIsNone(vol.disk)
                else:
                    self.assertEqual("/dev/vdb", vol.disk)
                self.assertFalse(vol.can_live_on_logical_volume)


class TestBootRoles(unittest.TestCase):
    def test_every_kind_is_covered(self):
        platforms = {(family, platform) for family, platform, _ in BOOT_ROLES}
        for family, platform in platforms:
            for kind in ProposalKind:
                with self.subTest(family=family, platform=platform, kind=kind):
                    self.assertIn((family, platform, kind), BOOT_ROLES)

    def test_every_ppc_flavor_is_covered(self):
        for flavor in PlatformFlavor:
            with self.subTest(flavor=flavor):
                self.assertIn(
                    (ArchFamily.PPC, flavor, ProposalKind.PARTITIONS), BOOT_ROLES
                )

    def test_lvm_and_encryption_need_the_same(self):
        for family, platform, kind in BOOT_ROLES:
            with self.subTest(family=family, platform=platform):
                self.assertEqual(
                    roles_for(family, platform, ProposalKind.LVM),
                    roles_for(family, platform, ProposalKind.ENCRYPTED),
                )

    def test_unknown_is_empty(self):
        self.assertEqual(
            (), roles_for(ArchFamily.OTHER, Firmware.NONE, ProposalKind.LVM)
        )
        self.assertEqual(
            (), roles_for(ArchFamily.X86, Firmware.NONE, ProposalKind.LVM)
        )

    def test_x86(self):
        self.assertEqual(
            (VolumeRole.EFI,),
            roles_for(ArchFamily.X86, Firmware.UEFI, ProposalKind.PARTITIONS),
        )
        self.assertEqual(
            (VolumeRole.EFI, VolumeRole.BOOT),
            roles_for(ArchFamily.X86, Firmware.UEFI, ProposalKind.LVM),
        )
        self.assertEqual(
            (), roles_for(ArchFamily.X86, Firmware.BIOS, ProposalKind.PARTITIONS)
        )
        self.assertEqual(
            (VolumeRole.BOOT,),
            roles_for(ArchFamily.X86, Firmware.BIOS, ProposalKind.LVM),
        )
