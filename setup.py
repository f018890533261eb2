#!/usr/bin/env python3
# -*- mode: python; -*-
#
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

"""
y2storage
=========
Boot requirements of the YaST partitioning proposal
"""

import os
import sys

from setuptools import find_packages, setup

with open(os.path.join(os.path.dirname(__file__),
                       'y2storagecore', '__init__.py')) as init:
    ns = {}
    exec(init.read(), ns)
    version = ns['__version__']

if sys.argv[-1] == 'clean':
    print("Cleaning up ...")
    os.system('rm -rf y2storage.egg-info build dist')
    sys.exit()

setup(name='y2storage',
      version=version,
      description="Boot requirements of the YaST partitioning proposal",
      long_description=__doc__,
      license="AGPLv3+",
      python_requires='>=3.8',
      packages=find_packages(exclude=["tests", "*.tests"]),
      install_requires=[
          'attrs',
          'jsonschema',
          'PyYAML',
      ],
      extras_require={
          'test': [
              'parameterized',
              'pytest',
          ],
      },
      entry_points={
          'console_scripts': [
              'y2storage-boot-requirements = y2storage.cmd.bootreqs:main',
          ],
      },
      )
