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
import math
from typing import List, Optional

import attr
import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from y2storage.common.errors import ConfigValidationError, DeviceNotFoundError
from y2storage.common.types import FsType, PartitionId

log = logging.getLogger("y2storage.models.filesystem")

KiB = 1024
MiB = 1024 * 1024
GiB = 1024 * 1024 * 1024
TiB = 1024 * 1024 * 1024 * 1024

HUMAN_UNITS = ["B", "K", "M", "G", "T", "P"]


def humanize_size(size):
    if size == 0:
        return "0B"
    p = int(math.floor(math.log(size, 2) / 10))
    # We want to truncate the non-integral part, not round to nearest.
    s = "{:.17f}".format(size / 2 ** (10 * p))
    i = s.index(".")
    s = s[: i + 4]
    return s + HUMAN_UNITS[int(p)]


def dehumanize_size(size):
    # convert human 'size' to integer
    size_in = size

    if not size:
        raise ValueError("input cannot be empty")

    # "500 MiB", "2 TiB" and "33MB" are spelled "500M", "2T" and "33M" below
    size = size.replace(" ", "")
    if size[-2:].upper() == "IB":
        size = size[:-2]
    elif len(size) > 2 and size[-1] in "bB" and not size[-2].isdigit():
        size = size[:-1]
    if not size:
        raise ValueError("{input!r} is not valid input".format(input=size_in))

    if not size[-1].isdigit():
        suffix = size[-1].upper()
        size = size[:-1]
    else:
        suffix = None

    parts = size.split(".")
    if len(parts) > 2:
        raise ValueError("{input!r} is not valid input".format(input=size_in))
    elif len(parts) == 2:
        div = 10 ** len(parts[1])
        size = parts[0] + parts[1]
    else:
        div = 1

    try:
        num = int(size)
    except ValueError:
        raise ValueError("{input!r} is not valid input".format(input=size_in))

    if suffix is not None:
        if suffix not in HUMAN_UNITS:
            raise ValueError(
                "unrecognized suffix {suffix!r} in {input!r}".format(
                    suffix=suffix, input=size_in
                )
            )
        mult = 2 ** (10 * HUMAN_UNITS.index(suffix))
    else:
        mult = 1

    if num < 0:
        raise ValueError("{input!r}: cannot be negative".format(input=size_in))

    return num * mult // div


@attr.s(auto_attribs=True)
class Partition:
    name: str
    size: int
    id: PartitionId = PartitionId.LINUX
    file_system: Optional[FsType] = None
    mount_point: Optional[str] = None
    label: Optional[str] = None
    flag: Optional[str] = None
    _disk: Optional["Disk"] = attr.ib(default=None, repr=False, eq=False)

    @property
    def disk(self):
        return self._disk


@attr.s(auto_attribs=True)
class Disk:
    name: str
    size: int
    partition_table: Optional[str] = "gpt"
    _partitions: List[Partition] = attr.ib(factory=list)

    def __attrs_post_init__(self):
        for part in self._partitions:
            part._disk = self

    def partitions(self):
        return list(self._partitions)

    def add_partition(self, part):
        part._disk = self
        self._partitions.append(part)
        return part


@attr.s(auto_attribs=True)
class Devicegraph:
    _disks: List[Disk] = attr.ib(factory=list)

    def all_disks(self):
        return list(self._disks)

    def find_disk(self, name):
        for disk in self._disks:
            if disk.name == name:
                return disk
        raise DeviceNotFoundError(name)


_size_schema = {"type": ["string", "integer"]}

DEVICEGRAPH_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "disk": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "size": _size_schema,
                    "partition_table": {"enum": ["gpt", "msdos", "ms-dos", "dasd"]},
                    "partitions": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "partition": {
                                    "type": "object",
                                    "properties": {
                                        "name": {"type": "string"},
                                        "size": _size_schema,
                                        "id": {"type": ["string", "integer"]},
                                        "file_system": {
                                            "enum": [fs.value for fs in FsType],
                                        },
                                        "mount_point": {"type": "string"},
                                        "label": {"type": "string"},
                                        "flag": {"type": "string"},
                                    },
                                    "required": ["name", "size"],
                                    "additionalProperties": False,
                                },
                            },
                            "required": ["partition"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["name", "size"],
                "additionalProperties": False,
            },
        },
        "required": ["disk"],
        "additionalProperties": False,
    },
}


def _size_from_yaml(value):
    if isinstance(value, int):
        return value
    return dehumanize_size(value)


def _partition_id_from_yaml(value):
    if isinstance(value, int):
        return PartitionId(value)
    try:
        return PartitionId[value.upper()]
    except KeyError:
        # "0xEF" and friends
        return PartitionId(int(value, 0))


def _partition_from_yaml(data):
    kw = dict(name=data["name"], size=_size_from_yaml(data["size"]))
    if "id" in data:
        kw["id"] = _partition_id_from_yaml(data["id"])
    if "file_system" in data:
        kw["file_system"] = FsType(data["file_system"])
    for key in "mount_point", "label", "flag":
        if key in data:
            kw[key] = data[key]
    return Partition(**kw)


def _disk_from_yaml(data):
    ptable = data.get("partition_table", "gpt")
    if ptable == "ms-dos":
        ptable = "msdos"
    return Disk(
        name=data["name"],
        size=_size_from_yaml(data["size"]),
        partition_table=ptable,
        partitions=[
            _partition_from_yaml(item["partition"])
            for item in data.get("partitions", [])
        ],
    )


def devicegraph_from_yaml(fp) -> Devicegraph:
    """Build a Devicegraph from the YAML description in `fp`.

    The format is a list of `disk` mappings, each with an optional list
    of `partition` mappings. Sizes can be integers (bytes) or strings
    like "500 MiB".
    """
    try:
        data = yaml.safe_load(fp)
    except yaml.YAMLError as original_exception:
        raise ConfigValidationError(
            "devicegraph", details=str(original_exception)
        ) from original_exception
    if data is None:
        data = []
    try:
        jsonschema.validate(data, DEVICEGRAPH_SCHEMA)
    except ValidationError as original_exception:
        raise ConfigValidationError(
            "devicegraph", details=original_exception.message
        ) from original_exception
    try:
        disks = [_disk_from_yaml(item["disk"]) for item in data]
    except ValueError as original_exception:
        raise ConfigValidationError(
            "devicegraph", details=str(original_exception)
        ) from original_exception
    log.debug("loaded devicegraph with disks %s", [d.name for d in disks])
    return Devicegraph(disks=disks)


def load_devicegraph(path) -> Devicegraph:
    with open(path) as fp:
        return devicegraph_from_yaml(fp)
