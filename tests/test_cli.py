import json
from pathlib import Path

import pytest

from piechart_widget.infrastructure.config import WidgetConfig
from piechart_widget.domain.models.dataset import AggregateFunction, DatasetType, DataSource, DrawType
from piechart_widget.presentation.cli import build_pie_chart

CONFIG = Path(__file__).resolve().parents[1] / "config" / "widget.yaml"


def test_config_loads_widget_settings():
    cfg = WidgetConfig.load(CONFIG)

    assert cfg.history.type == "file"
    assert cfg.macros.global_macros == {"{$HISTORY}": "7d"}
    assert cfg.widget.data_source is DataSource.HISTORY
    assert cfg.widget.data_sets[0].dataset_type is DatasetType.PATTERN_ITEM
    assert cfg.widget.data_sets[1].aggregate_function is AggregateFunction.AVG
    assert cfg.widget.chart.draw_type is DrawType.DOUGHNUT
    assert cfg.widget.merge.percent == 5

    options = cfg.widget.to_options()
    assert options.time_period.time_from == 1_704_067_200
    assert options.time_period.time_to == 1_704_070_799


def test_sample_config_builds_pie_chart(capsys):
    result = build_pie_chart(CONFIG)

    assert [sector.name for sector in result.sectors] == [
        "avg(Zabbix server: CPU idle time)",
        "avg(Zabbix server: CPU user time)",
        "Others",
    ]
    assert [sector.value for sector in result.sectors] == pytest.approx([82.5, 13.5, 5.0])
    assert str(result.total_value) == "101.00 %"

    printed = json.loads(capsys.readouterr().out)
    assert printed["total_value"] == "101.00 %"
    assert printed["legend"]["columns"] == 4
