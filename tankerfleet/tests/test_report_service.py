"""
Tests for the settlement report
"""
from datetime import date, datetime

from tankerfleet.services.report_service import ReportService
from tankerfleet.tests.conftest import make_driver, make_owner, make_route, make_trip


class TestSettlement:

    def test_settlement_per_driver(self, db):
        owner = make_owner()
        suresh = make_driver(owner, "Suresh")
        anil = make_driver(owner, "Anil")
        cheap = make_route(owner, "Lake", ["A"], rate_per_trip=400)
        dear = make_route(owner, "Well", ["B", "C"], rate_per_trip=900)
        make_trip(suresh, cheap, datetime(2024, 6, 1, 6, 0), count=2)
        latest = make_trip(suresh, dear, datetime(2024, 6, 5, 6, 0), count=1)
        make_trip(anil, cheap, datetime(2024, 6, 3, 6, 0), count=3)
        # Outside the range
        make_trip(anil, cheap, datetime(2024, 7, 3, 6, 0), count=5)

        report = ReportService.settlement(owner.id, date(2024, 6, 1), date(2024, 6, 30),
                                          deductions={suresh.id: 100.0}, paid_amounts={anil.id: 200.0})

        assert [s['driver_name'] for s in report['driver_settlements']] == ["Anil", "Suresh"]
        anil_row, suresh_row = report['driver_settlements']
        assert anil_row['total_trips'] == 3
        assert anil_row['total_earnings'] == 1200
        assert anil_row['payable'] == 1000
        assert suresh_row['total_earnings'] == 1700
        assert suresh_row['payable'] == 1600
        assert suresh_row['trips'][0]['trip_id'] == latest.id
        assert suresh_row['trips'][0]['subtotal'] == 900

        assert report['total_trips'] == 6
        assert report['total_revenue'] == 2900
        assert report['total_deductions'] == 100
        assert report['total_paid'] == 200
        assert report['net_payable'] == 2600

    def test_end_day_is_inclusive(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        # 20:00 UTC on 30 June is 1 July in Asia/Kolkata
        make_trip(driver, route, datetime(2024, 6, 30, 17, 0))
        make_trip(driver, route, datetime(2024, 6, 30, 20, 0))
        report = ReportService.settlement(owner.id, date(2024, 6, 30), date(2024, 6, 30))
        assert report['total_trips'] == 1

    def test_filters(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        other = make_driver(owner, "Mahesh")
        route = make_route(owner)
        make_trip(driver, route, datetime(2024, 6, 2, 6, 0))
        make_trip(other, route, datetime(2024, 6, 2, 6, 0))
        report = ReportService.settlement(owner.id, date(2024, 6, 1), date(2024, 6, 30), driver_id=other.id)
        assert [s['driver_id'] for s in report['driver_settlements']] == [other.id]

    def test_empty(self, db):
        report = ReportService.settlement(make_owner().id, date(2024, 6, 1), date(2024, 6, 30))
        assert report['driver_settlements'] == []
        assert report['net_payable'] == 0
