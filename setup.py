#!/usr/bin/env python
"""Kalman filtering on the SE(3) Lie group

This is a library of Kalman filters (EKF, square root EKF, invariant EKF
and unscented Kalman filter on manifolds) for rigid body pose estimation,
that employs the Casadi framework for the group algebra and its jacobians.
"""

from setuptools import setup, find_packages
import sys

if sys.version_info < (3, 6):
    raise SystemExit("requires  Python >= 3.6")

DOCLINES = __doc__.split("\n")

CLASSIFIERS = """\
Development Status :: 1 - Planning
Intended Audience :: Science/Research
Intended Audience :: Developers
License :: OSI Approved :: BSD License
Programming Language :: Python
Programming Language :: Python :: 3
Topic :: Software Development
Topic :: Scientific/Engineering :: Mathematics
Topic :: Scientific/Engineering :: Physics
Operating System :: Microsoft :: Windows
Operating System :: POSIX
Operating System :: Unix
Operating System :: MacOS
"""

# pylint: disable=invalid-name

package_name = "liekf"

setup(
    name=package_name,
    description=DOCLINES[0],
    long_description="\n".join(DOCLINES[2:]),
    license="BSD 3-Clause",
    classifiers=[_f for _f in CLASSIFIERS.split("\n") if _f],
    platforms=["Windows", "Linux", "Solaris", "Mac OS-X", "Unix"],
    python_requires=">=3.6",
    install_requires=[
        "scipy",
        "numpy",
        "casadi",
        "simpy",
    ],
    extras_require={"test": ["pytest"]},
    packages=find_packages(include=["liekf", "liekf.*"]),
    version="0.1.0",
    zip_safe=True,
)
