from __future__ import annotations

import pytest

from piechart_widget.application.use_cases.build_sectors import OTHERS_LABEL, BuildSectors
from piechart_widget.domain.models.dataset import AggregateFunction, DataSet, DatasetType, ItemRole
from piechart_widget.domain.models.metric import ItemRecord, Metric
from piechart_widget.domain.models.options import MergeConfig, TotalValueConfig, UnitsConfig
from piechart_widget.infrastructure.formatting.units import UnitConverter

PLAIN = DataSet(dataset_type=DatasetType.SINGLE_ITEM)
MERGE_5 = MergeConfig(merge=True, percent=5, color="#768D99")


def _metric(
    name: str,
    value: float,
    role: ItemRole = ItemRole.NORMAL,
    units: str = "",
    data_set: DataSet = PLAIN,
) -> Metric:
    item = ItemRecord(itemid=name, hostid="10084", host_name="Zabbix server", name=name, units=units)
    return Metric(item=item, data_set=0, dataset=data_set, color="#FF465C", role=role, name=name, value=value)


def _build(metrics, merge=MergeConfig(), total=TotalValueConfig(), units=UnitsConfig()):
    return BuildSectors(UnitConverter()).execute(metrics, merge=merge, total=total, units=units)


def test_percentages_are_relative_to_the_sum():
    result = _build([_metric("a", 30), _metric("b", 70)], total=TotalValueConfig(decimal_places=0))

    assert [sector.percent_of_total for sector in result.sectors] == pytest.approx([30.0, 70.0])
    assert result.raw_total_value == 100
    assert str(result.total_value) == "100"


def test_small_sectors_are_merged_into_others():
    result = _build([_metric("a", 1), _metric("b", 2), _metric("c", 97)], merge=MERGE_5)

    assert [sector.name for sector in result.sectors] == ["c", OTHERS_LABEL]
    others = result.sectors[-1]
    assert others.value == 3
    assert others.color == "#768D99"
    assert others.percent_of_total == pytest.approx(3.0)
    assert others.formatted_value.value == "3"
    assert sum(sector.percent_of_total for sector in result.sectors) == pytest.approx(100.0)


def test_single_small_sector_is_left_in_place():
    result = _build([_metric("a", 1), _metric("b", 49), _metric("c", 50)], merge=MERGE_5)

    assert [sector.name for sector in result.sectors] == ["a", "b", "c"]
    assert result.sectors[0].percent_of_total == pytest.approx(1.0)


def test_merge_disabled_keeps_every_sector():
    result = _build([_metric("a", 1), _metric("b", 2), _metric("c", 97)])

    assert len(result.sectors) == 3


def test_total_sector_sets_the_basis_and_reports_full_percent():
    metrics = [
        _metric("used", 20),
        _metric("free", 30),
        _metric("total", 200, role=ItemRole.TOTAL),
    ]

    result = _build(metrics, merge=MERGE_5)

    by_name = {sector.name: sector for sector in result.sectors}
    assert by_name["total"].is_total
    assert by_name["total"].percent_of_total == 100
    assert by_name["used"].percent_of_total == pytest.approx(10.0)
    assert by_name["free"].percent_of_total == pytest.approx(15.0)
    assert result.raw_total_value == 200


def test_total_role_is_ignored_for_aggregated_data_sets():
    aggregated = DataSet(dataset_type=DatasetType.SINGLE_ITEM, dataset_aggregation=AggregateFunction.SUM)
    metrics = [_metric("a", 25, role=ItemRole.TOTAL, data_set=aggregated), _metric("b", 75)]

    result = _build(metrics)

    assert not result.sectors[0].is_total
    assert result.sectors[0].percent_of_total == pytest.approx(25.0)


def test_units_override_and_hidden_units():
    metrics = [_metric("a", 2048, units="B"), _metric("b", 1024, units="B")]

    shown = _build(metrics, units=UnitsConfig(units_show=True))
    overridden = _build(metrics, units=UnitsConfig(units_show=True, units_value="bps"))
    hidden = _build(metrics, units=UnitsConfig(units_show=False))

    assert str(shown.sectors[0].formatted_value) == "2 KB"
    assert str(overridden.sectors[0].formatted_value) == "2.05 Kbps"
    assert str(hidden.sectors[0].formatted_value) == "2048"
    assert str(shown.total_value) == "3.00 KB"


def test_total_value_keeps_exact_decimals():
    result = _build([_metric("a", 12.5), _metric("b", 0.25)], total=TotalValueConfig(decimal_places=3))

    assert result.total_value.value == "12.750"


def test_zero_total_reports_full_percent():
    result = _build([_metric("a", 0), _metric("b", 0)])

    assert [sector.percent_of_total for sector in result.sectors] == [100.0, 100.0]
    assert result.total_value.value == "0.00"


def test_no_metrics_builds_empty_collection():
    result = _build([])

    assert result.sectors == ()
    assert result.total_value.value == "0.00"
