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

"""Environment-driven defaults for planning."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlanningSettings(BaseSettings):
    step_size: float = Field(default=0.1, gt=0.0)
    max_iterations: int = Field(default=5000, ge=1)
    timeout: float | None = None
    seed: int | None = None
    num_workers: int = Field(default=1, ge=1)
    smoothing_iterations: int = Field(default=100, ge=0)
    connect_bias: float = Field(default=0.1, ge=0.0, le=1.0)
    ik_attempts: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="MOTIONPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )
