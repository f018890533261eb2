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

import io
import os
import tempfile
import unittest
from unittest import mock

import yaml

from y2storage.cmd import bootreqs
from y2storage.common.types import (
    ArchFamily,
    FsType,
    PartitionId,
    PlatformFlavor,
    VolumeSpecification,
)
from y2storage.models.arch import Arch

DEVICEGRAPH = """\
- disk:
    name: /dev/sda
    size: 200 GiB
    partitions:
    - partition:
        name: /dev/sda1
        size: 8 MiB
        id: prep
- disk:
    name: /dev/sdb
    size: 200 GiB
"""


class TestBootRequirementsCommand(unittest.TestCase):
    def setUp(self):
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.tmpdir = tmpdir.name
        self.devicegraph = self.write("devicegraph.yaml", DEVICEGRAPH)
        p = mock.patch.object(bootreqs, "setup_logger")
        self.setup_logger = p.start()
        self.addCleanup(p.stop)
        p = mock.patch.object(bootreqs, "teardown_logger")
        self.teardown_logger = p.start()
        self.addCleanup(p.stop)

    def write(self, name, content):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w") as fp:
            fp.write(content)
        return path

    def run_main(self, *args):
        argv = ["--devicegraph", self.devicegraph] + list(args)
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout, \
                mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            ret = bootreqs.main(argv)
        return ret, stdout.getvalue(), stderr.getvalue()

    def test_uefi(self):
        ret, out, _ = self.run_main(
            "--root-device", "/dev/sdb", "--arch", "x86", "--efi"
        )
        self.assertEqual(0, ret)
        self.assertEqual(
            [
                {
                    "mount_point": "/boot/efi",
                    "filesystem_type": "VFAT",
                    "min_size": "33.000M",
                    "desired_size": "500.000M",
                    "max_start_offset": "2.000T",
                    "partition_id": "ESP",
                    "can_live_on_logical_volume": False,
                },
            ],
            yaml.safe_load(out),
        )
        self.setup_logger.assert_called_once_with(
            dir=bootreqs.LOGDIR, base="y2storage-bootreqs"
        )
        self.teardown_logger.assert_called_once_with(
            self.setup_logger.return_value
        )

    def test_bios_partitions(self):
        ret, out, _ = self.run_main(
            "--root-device", "/dev/sdb", "--arch", "x86", "--no-efi"
        )
        self.assertEqual(0, ret)
        self.assertEqual([], yaml.safe_load(out))

    def test_settings_file(self):
        settings = self.write("settings.yaml", "root_device: /dev/sda\nuse_lvm: true\n")
        ret, out, _ = self.run_main(
            "--settings", settings, "--arch", "ppc", "--platform-flavor", "lpar"
        )
        self.assertEqual(0, ret)
        [boot] = yaml.safe_load(out)
        self.assertEqual("/boot", boot["mount_point"])
        self.assertEqual("/dev/sda", boot["disk"])

    def test_settings_file_overridden(self):
        settings = self.write("settings.yaml", "root_device: /dev/sda\n")
        ret, out, _ = self.run_main(
            "--settings", settings, "--root-device", "/dev/sdb", "--arch", "s390"
        )
        self.assertEqual(0, ret)
        [zipl] = yaml.safe_load(out)
        self.assertEqual("/dev/sdb", zipl["disk"])
        self.assertEqual("EXT2", zipl["filesystem_type"])

    def test_unknown_disk(self):
        ret, out, err = self.run_main(
            "--root-device", "/dev/sdz", "--arch", "x86", "--efi"
        )
        self.assertEqual(1, ret)
        self.assertEqual("", out)
        self.assertIn("cannot compute boot requirements for '/dev/sdz'", err)

    def test_bad_settings(self):
        settings = self.write("settings.yaml", "root_device: /dev/sda\nlvm: true\n")
        ret, _, err = self.run_main("--settings", settings, "--arch", "x86")
        self.assertEqual(1, ret)
        self.assertIn("Malformed proposal settings", err)

    def test_no_lvm_overrides_settings_file(self):
        settings = self.write("settings.yaml", "root_device: /dev/sdb\nuse_lvm: true\n")
        ret, out, _ = self.run_main(
            "--settings", settings, "--no-lvm", "--arch", "x86", "--no-efi"
        )
        self.assertEqual(0, ret)
        self.assertEqual([], yaml.safe_load(out))

    def test_unparsable_settings(self):
        settings = self.write("settings.yaml", "root_device: [/dev/sda\n")
        ret, out, err = self.run_main("--settings", settings, "--arch", "x86")
        self.assertEqual(1, ret)
        self.assertEqual("", out)
        self.assertIn("Malformed proposal settings", err)
        self.teardown_logger.assert_called_once_with(
            self.setup_logger.return_value
        )

    def test_unparsable_devicegraph(self):
        self.devicegraph = self.write("broken.yaml", "- disk: {name: /dev/sda\n")
        ret, _, err = self.run_main("--root-device", "/dev/sda", "--arch", "x86")
        self.assertEqual(1, ret)
        self.assertIn("Malformed devicegraph", err)

    def test_missing_devicegraph(self):
        self.devicegraph = os.path.join(self.tmpdir, "nonexistent.yaml")
        ret, _, err = self.run_main("--root-device", "/dev/sda", "--arch", "x86")
        self.assertEqual(1, ret)
        self.assertIn("nonexistent.yaml", err)

    def test_root_device_required(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as cm:
                bootreqs.main(["--devicegraph", self.devicegraph])
        self.assertEqual(2, cm.exception.code)


class TestMakeArch(unittest.TestCase):
    def opts(self, **kw):
        parser = bootreqs.make_args_parser()
        opts = parser.parse_args(["--devicegraph", os.devnull])
        for k, v in kw.items():
            setattr(opts, k, v)
        return opts

    def test_probed(self):
        probed = Arch(family=ArchFamily.PPC, flavor=PlatformFlavor.KVM)
        with mock.patch.object(Arch, "probe", return_value=probed) as m_probe:
            self.assertEqual(probed, bootreqs.make_arch(self.opts()))
        m_probe.assert_called_once_with()

    def test_probed_with_overrides(self):
        probed = Arch(family=ArchFamily.X86, efiboot=True)
        with mock.patch.object(Arch, "probe", return_value=probed):
            arch = bootreqs.make_arch(self.opts(efi=False))
        self.assertEqual(Arch(family=ArchFamily.X86, efiboot=False), arch)

    def test_explicit(self):
        arch = bootreqs.make_arch(
            self.opts(arch="ppc", platform_flavor="bare_metal")
        )
        self.assertEqual(
            Arch(family=ArchFamily.PPC, flavor=PlatformFlavor.BARE_METAL), arch
        )


class TestVolumeAsDict(unittest.TestCase):
    def test_skips_unset(self):
        vol = VolumeSpecification(
            mount_point=None,
            filesystem_type=None,
            partition_id=PartitionId.PREP,
            min_size=256 * 1024,
            desired_size=1 << 20,
            max_size=8 << 20,
        )
        self.assertEqual(
            {
                "min_size": "256.000K",
                "desired_size": "1.000M",
                "max_size": "8.000M",
                "partition_id": "PREP",
                "can_live_on_logical_volume": True,
            },
            bootreqs.volume_as_dict(vol),
        )

    def test_enum_names(self):
        vol = VolumeSpecification(
            mount_point="/boot",
            filesystem_type=FsType.EXT4,
            min_size=1 << 20,
            desired_size=1 << 20,
            disk="/dev/sda",
        )
        d = bootreqs.volume_as_dict(vol)
        self.assertEqual("EXT4", d["filesystem_type"])
        self.assertEqual("/dev/sda", d["disk"])
