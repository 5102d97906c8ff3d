#!/usr/bin/env python
# Copyright 2019 The TensorNetwork Developers
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import find_packages, setup

# This reads the __version__ variable from tensorplan/version.py
with open('tensorplan/version.py') as f:
  exec(f.read(), globals())

description = ('Planning and execution of Einstein-notation tensor '
               'contractions with reusable temporaries.')

# Reading long Description from README.md file.
with open("README.md", "r") as fh:
  long_description = fh.read()

# Read in requirements
requirements = [
    requirement.strip() for requirement in open('requirements.txt').readlines()
    if requirement.strip()
]

setup(
    name='tensorplan',
    version=__version__,
    url='http://github.com/google/TensorNetwork',
    author='The TensorNetwork Developers',
    python_requires=('>=3.7.0'),
    install_requires=requirements,
    extras_require={'test': ['pytest']},
    license='Apache 2',
    description=description,
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(),
)
