# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Pass/fail criteria in the k6 threshold expression grammar.

A threshold names a metric and an expression ``<aggregation><operator><value>``::

    http_req_duration: p(95)<500
    http_req_failed:   rate<0.05
    http_reqs:         count>=100
"""

import re
from collections.abc import Iterable, Mapping
from typing import Annotated, Any

from pydantic import Field, model_validator

from loadperf.common.config.base_config import BaseConfig
from loadperf.common.enums import (
    AggregationType,
    MetricKind,
    MetricName,
    ThresholdOperator,
)

_EXPRESSION_RE = re.compile(
    r"^\s*(avg|min|med|max|count|rate|p\(\s*(\d+(?:\.\d+)?)\s*\))"
    r"\s*(<=|>=|==|!=|<|>)\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*$"
)

SUPPORTED_AGGREGATIONS: dict[MetricKind, tuple[AggregationType, ...]] = {
    MetricKind.TREND: (
        AggregationType.AVG,
        AggregationType.MIN,
        AggregationType.MED,
        AggregationType.MAX,
        AggregationType.PERCENTILE,
    ),
    MetricKind.RATE: (AggregationType.RATE,),
    MetricKind.COUNTER: (AggregationType.COUNT, AggregationType.RATE),
}


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


class Threshold(BaseConfig):
    """A single pass/fail criterion on an aggregated metric."""

    metric: MetricName
    aggregation: AggregationType
    percentile: Annotated[
        float | None,
        Field(ge=0, le=100, description="N of p(N). Only set for percentile thresholds."),
    ] = None
    operator: ThresholdOperator
    value: float

    @model_validator(mode="after")
    def _check_aggregation(self) -> "Threshold":
        allowed = SUPPORTED_AGGREGATIONS[self.metric.kind]
        if self.aggregation not in allowed:
            names = ", ".join(
                "p(N)" if a == AggregationType.PERCENTILE else str(a) for a in allowed
            )
            raise ValueError(
                f"Aggregation '{self.aggregation}' is not supported for {self.metric.kind} "
                f"metric '{self.metric}'. Supported: {names}"
            )
        if (self.aggregation == AggregationType.PERCENTILE) != (
            self.percentile is not None
        ):
            raise ValueError(
                "A percentile value is required for p(N) thresholds and only allowed for them"
            )
        return self

    @property
    def aggregation_label(self) -> str:
        if self.aggregation == AggregationType.PERCENTILE:
            return f"p({_format_number(self.percentile)})"
        return str(self.aggregation)

    @property
    def expression(self) -> str:
        """Canonical expression text, e.g. ``p(95)<500``."""
        return f"{self.aggregation_label}{self.operator}{_format_number(self.value)}"

    def __str__(self) -> str:
        return f"{self.metric}: {self.expression}"

    @classmethod
    def parse(cls, metric: str | MetricName, expression: str) -> "Threshold":
        """Parse a k6 expression such as ``p(95)<500`` for ``metric``.

        Raises:
            ValueError: If the metric is unknown, the expression is malformed or
                the aggregation is not supported by the metric.
        """
        try:
            metric_name = MetricName(metric)
        except ValueError:
            known = ", ".join(str(m) for m in MetricName)
            raise ValueError(
                f"Unknown threshold metric '{metric}'. Known metrics: {known}"
            ) from None

        match = _EXPRESSION_RE.match(expression)
        if match is None:
            raise ValueError(
                f"Invalid threshold expression '{expression}' for '{metric_name}'. "
                "Expected '<aggregation><operator><value>', e.g. 'p(95)<500' or 'rate<0.05'"
            )
        aggregation, percentile, operator, value = match.groups()
        if percentile is not None:
            aggregation = AggregationType.PERCENTILE
        return cls(
            metric=metric_name,
            aggregation=AggregationType(aggregation),
            percentile=float(percentile) if percentile is not None else None,
            operator=ThresholdOperator(operator),
            value=float(value),
        )

    @classmethod
    def parse_cli(cls, text: str) -> "Threshold":
        """Parse the ``<metric>:<expression>`` CLI form, e.g. ``http_req_failed:rate<0.05``."""
        metric, sep, expression = text.partition(":")
        if not sep:
            raise ValueError(
                f"Invalid threshold '{text}'. Expected '<metric>:<expression>', "
                "e.g. --threshold 'http_req_duration:p(95)<500'"
            )
        return cls.parse(metric.strip(), expression)


def thresholds_from_mapping(
    mapping: Mapping[str, str | Iterable[str]],
) -> list[Threshold]:
    """Build thresholds from the k6 mapping form ``{metric: [expression, ...]}``."""
    thresholds = []
    for metric, expressions in mapping.items():
        if isinstance(expressions, str):
            expressions = [expressions]
        thresholds.extend(Threshold.parse(metric, expr) for expr in expressions)
    return thresholds


def coerce_thresholds(value: Any) -> Any:
    """Normalize every accepted threshold input form into a list.

    Accepts the k6 mapping, a list of ``metric:expression`` strings, or a list
    of :class:`Threshold` instances / field dicts.
    """
    if value is None:
        return []
    if isinstance(value, Mapping):
        return thresholds_from_mapping(value)
    if isinstance(value, str):
        return [Threshold.parse_cli(value)]
    if isinstance(value, Iterable):
        return [Threshold.parse_cli(v) if isinstance(v, str) else v for v in value]
    return value
