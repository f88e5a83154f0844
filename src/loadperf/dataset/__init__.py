# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.dataset.signup_payload import SignupPayload, SignupPayloadGenerator

__all__ = ["SignupPayload", "SignupPayloadGenerator"]
