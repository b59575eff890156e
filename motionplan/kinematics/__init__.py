# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Frame Model and Inverse Kinematics

Kinematic chains with forward kinematics and a geometric Jacobian, a JSON
model loader, and a damped-least-squares IK solver.

## Usage

```python
from motionplan.kinematics import JacobianIK, make_planar_arm

chain = make_planar_arm([1.0, 1.0])
target = chain.forward_kinematics([0.3, 0.4])
result = JacobianIK().solve(chain, target, seed=[0.0, 0.0])
```
"""

from motionplan.kinematics.frame import Joint, KinematicChain, make_planar_arm
from motionplan.kinematics.jacobian_ik import JacobianIK
from motionplan.kinematics.model_loader import chain_from_dict, load_chain

__all__ = [
    "JacobianIK",
    "Joint",
    "KinematicChain",
    "chain_from_dict",
    "load_chain",
    "make_planar_arm",
]
