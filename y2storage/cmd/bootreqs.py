#!/usr/bin/env python3
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

import argparse
import enum
import logging
import sys

import attr
import yaml

from y2storage.common.errors import StorageError
from y2storage.common.types import ArchFamily, PlatformFlavor
from y2storage.models.arch import Arch
from y2storage.models.filesystem import humanize_size, load_devicegraph
from y2storage.proposal.analyzer import DevicegraphAnalyzer
from y2storage.proposal.boot import BootRequirementsChecker
from y2storage.proposal.settings import ProposalSettings, load_settings
from y2storagecore.log import setup_logger, teardown_logger

LOGDIR = ".y2storage"

_SIZE_FIELDS = {"min_size", "desired_size", "max_size", "max_start_offset"}


def make_args_parser():
    parser = argparse.ArgumentParser(
        description="Show the boot volumes a partitioning proposal needs",
        prog="y2storage-boot-requirements",
    )
    parser.add_argument(
        "--devicegraph",
        metavar="FILE",
        required=True,
        help="YAML description of the disks and their partitions",
    )
    parser.add_argument(
        "--settings",
        metavar="FILE",
        help="YAML file with the proposal settings",
    )
    parser.add_argument("--root-device", dest="root_device")
    parser.add_argument(
        "--lvm",
        action="store_const",
        const=True,
        dest="use_lvm",
        help="Make an LVM based proposal",
    )
    parser.add_argument(
        "--no-lvm",
        action="store_const",
        const=False,
        dest="use_lvm",
        help="Make a plain partition proposal",
    )
    parser.add_argument("--encryption-password", dest="encryption_password")
    parser.add_argument(
        "--arch",
        choices=[family.value for family in ArchFamily],
        help="Override the probed architecture",
    )
    parser.add_argument(
        "--efi",
        action="store_const",
        const=True,
        dest="efi",
        help="Boot with UEFI",
    )
    parser.add_argument(
        "--no-efi",
        action="store_const",
        const=False,
        dest="efi",
        help="Boot with a legacy BIOS",
    )
    parser.add_argument(
        "--platform-flavor",
        dest="platform_flavor",
        choices=[flavor.value for flavor in PlatformFlavor],
        help="Override the probed POWER platform flavor",
    )
    parser.add_argument(
        "--log-dir",
        dest="log_dir",
        default=LOGDIR,
        help="where to write the log files",
    )
    return parser


def make_settings(opts):
    overrides = dict(
        root_device=opts.root_device,
        use_lvm=opts.use_lvm,
        encryption_password=opts.encryption_password,
    )
    if opts.settings is not None:
        return load_settings(opts.settings, **overrides)
    return ProposalSettings.from_config(
        {k: v for k, v in overrides.items() if v is not None}
    )


def make_arch(opts):
    if opts.arch is None:
        arch = Arch.probe()
    else:
        arch = Arch(family=ArchFamily(opts.arch))
    if opts.efi is not None:
        arch = attr.evolve(arch, efiboot=opts.efi)
    if opts.platform_flavor is not None:
        arch = attr.evolve(arch, flavor=PlatformFlavor(opts.platform_flavor))
    return arch


def volume_as_dict(volume):
    r = {}
    for field in attr.fields(type(volume)):
        v = getattr(volume, field.name)
        if v is None:
            continue
        if isinstance(v, enum.Enum):
            v = v.name
        elif field.name in _SIZE_FIELDS:
            v = humanize_size(v)
        r[field.name] = v
    return r


def main(argv=None):
    parser = make_args_parser()
    opts = parser.parse_args(argv)
    if opts.settings is None and opts.root_device is None:
        parser.error("--root-device is required when --settings is not given")

    logfiles = setup_logger(dir=opts.log_dir, base="y2storage-bootreqs")
    logger = logging.getLogger("y2storage")
    logger.info("Arguments passed: %s", sys.argv if argv is None else argv)

    try:
        devicegraph = load_devicegraph(opts.devicegraph)
        settings = make_settings(opts)
        arch = make_arch(opts)
        checker = BootRequirementsChecker(
            settings, DevicegraphAnalyzer(devicegraph), arch
        )
        volumes = checker.needed_partitions()
    except (StorageError, OSError) as e:
        logger.exception("computing boot requirements failed")
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        teardown_logger(logfiles)

    yaml.safe_dump(
        [volume_as_dict(v) for v in volumes],
        sys.stdout,
        default_flow_style=False,
        sort_keys=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
