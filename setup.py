#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import setup


setup(
    name='kvmigrate',
    version='0.1',
    description='Copy the whole keyspace of a Redis database to another one with DUMP/RESTORE.',
    packages=['kvmigrate', 'kvmigrate.libs'],
    scripts=['bin/kvmigrate.py'],
    install_requires=['redis>=5'],
    extras_require={'test': ['pytest>=7']},
    python_requires='>=3.7',
    classifiers=[
        'License :: OSI Approved :: GNU Affero General Public License v3 or later (AGPLv3+)',
        'Development Status :: 3 - Alpha',
        'Environment :: Console',
        'Operating System :: POSIX :: Linux',
        'Intended Audience :: System Administrators',
        'Programming Language :: Python :: 3',
        'Topic :: Database',
    ],
    include_package_data=True,
    package_data={'kvmigrate': ['config/*.json']},
)
