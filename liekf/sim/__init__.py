"""
Discrete event simulation of a body moving on SE(3), observed by
landmark and GPS fixes, with every filter of the bank running in
lock-step on the same data.

uros: simpy core, topics and logger
msgs: message layouts
simulator: ground truth and noisy data
estimator: filter node
launch: single and monte carlo runs
"""
