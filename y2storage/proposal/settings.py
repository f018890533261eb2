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
from typing import Optional

import attr
import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from y2storage.common.errors import ConfigValidationError
from y2storage.common.types import ProposalKind

log = logging.getLogger("y2storage.proposal.settings")


def proposal_kind(settings) -> ProposalKind:
    """The kind of proposal described by `settings`.

    Only `use_lvm` and `use_encryption` are looked at, so any object
    carrying those works. A missing `use_encryption` means no encryption.
    """
    if settings.use_lvm:
        return ProposalKind.LVM
    elif getattr(settings, "use_encryption", False):
        return ProposalKind.ENCRYPTED
    else:
        return ProposalKind.PARTITIONS


SETTINGS_SCHEMA = {
    "type": "object",
    "properties": {
        "root_device": {"type": "string"},
        "use_lvm": {"type": "boolean"},
        "encryption_password": {"type": ["string", "null"]},
    },
    "required": ["root_device"],
    "additionalProperties": False,
}


@attr.s(auto_attribs=True, frozen=True)
class ProposalSettings:
    root_device: str
    use_lvm: bool = False
    encryption_password: Optional[str] = attr.ib(default=None, repr=False)

    @property
    def use_encryption(self):
        return bool(self.encryption_password)

    @property
    def kind(self) -> ProposalKind:
        return proposal_kind(self)

    @classmethod
    def from_config(cls, data: dict) -> "ProposalSettings":
        try:
            jsonschema.validate(data, SETTINGS_SCHEMA)
        except ValidationError as original_exception:
            raise ConfigValidationError(
                "proposal settings", details=original_exception.message
            ) from original_exception
        return cls(**data)


def settings_from_yaml(fp, **overrides) -> ProposalSettings:
    """Read ProposalSettings from YAML, with `overrides` taking precedence.

    Overrides that are None are ignored.
    """
    try:
        data = yaml.safe_load(fp)
    except yaml.YAMLError as original_exception:
        raise ConfigValidationError(
            "proposal settings", details=str(original_exception)
        ) from original_exception
    if data is None:
        data = {}
    if isinstance(data, dict):
        data.update({k: v for k, v in overrides.items() if v is not None})
    settings = ProposalSettings.from_config(data)
    log.debug("loaded %s", settings)
    return settings


def load_settings(path, **overrides) -> ProposalSettings:
    with open(path) as fp:
        return settings_from_yaml(fp, **overrides)
