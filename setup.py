################################################################################
#
#  Copyright (C) 2021-2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

import setuptools


PACKAGE_NAME: str = "oasis_swerve"

setuptools.setup(
    name=PACKAGE_NAME,
    version="0.1.0",
    author="Garrett Brown",
    maintainer="Garrett Brown",
    description="Swerve odometry reconciliation and interpolated shot tables",
    url="https://github.com/eigendude/OASIS",
    license="Apache-2.0",
    zip_safe=True,
    keywords=[
        "robotics",
        "odometry",
        "swerve",
    ],
    classifiers=[
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    python_requires=">=3.9",
    packages=setuptools.find_packages(exclude=["test", "test.*"]),
    install_requires=[
        "numpy",
        "PyYAML",
        "setuptools",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    tests_require=[
        "pytest",
    ],
)
