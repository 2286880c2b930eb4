"""
This package contains the Lie groups used to represent the robot pose,
written with casadi so that they can be used symbolically and compiled.

so3: rotations, as direction cosine matrices (Dcm) and unit quaternions (Quat)
se3: rigid transformations, translation and unit quaternion (7 parameters)
"""
