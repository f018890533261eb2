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

_DEF_PERMS = 0o644

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def _file_handler(dir, base, level):
    nopid_file = os.path.join(dir, "{}-{}.log".format(base, level))
    logfile = "{}.{}".format(nopid_file, os.getpid())
    handler = logging.FileHandler(logfile)
    os.chmod(logfile, _DEF_PERMS)
    # os.symlink cannot replace an existing file or symlink so create
    # it and then rename it over.
    tmplink = logfile + ".link"
    os.symlink(os.path.basename(logfile), tmplink)
    os.rename(tmplink, nopid_file)
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return logfile, handler


def setup_logger(dir, base="y2storage"):
    """Log to <dir>/<base>-info.log and <dir>/<base>-debug.log.

    Returns a dict mapping "info" and "debug" to the real (per pid) log
    file names.
    """
    os.makedirs(dir, exist_ok=True)

    logger = logging.getLogger("")
    logger.setLevel(logging.DEBUG)

    r = {}
    for level in "info", "debug":
        logfile, handler = _file_handler(dir, base, level)
        logger.addHandler(handler)
        r[level] = logfile
    return r


def teardown_logger(logfiles):
    """Remove and close the handlers setup_logger() installed."""
    logger = logging.getLogger("")
    paths = {os.path.abspath(path) for path in logfiles.values()}
    for handler in list(logger.handlers):
        if getattr(handler, "baseFilename", None) in paths:
            logger.removeHandler(handler)
            handler.close()
