"""
Tests for owner slab table management
"""
import pytest

from tankerfleet.services.errors import ServiceError
from tankerfleet.services.slab_matcher import Slab
from tankerfleet.services.slab_service import SlabService
from tankerfleet.tests.conftest import make_owner, make_slabs


class TestSlabService:

    def test_create_and_table_order(self, db):
        owner = make_owner()
        SlabService.create(owner.id, {'min_trips': 50, 'max_trips': 99, 'payout_amount': 50000})
        SlabService.create(owner.id, {'min_trips': 0, 'max_trips': 49, 'payout_amount': 0})
        assert SlabService.slab_table(owner.id) == [Slab(0, 49, 0), Slab(50, 99, 50000)]

    def test_overlap_refused(self, db):
        owner = make_owner()
        make_slabs(owner)
        with pytest.raises(ServiceError) as exc:
            SlabService.create(owner.id, {'min_trips': 140, 'max_trips': 160, 'payout_amount': 1})
        assert "overlaps" in exc.value.message

    def test_other_owner_tables_are_independent(self, db):
        make_slabs(make_owner())
        other = make_owner("Other Owner")
        slab = SlabService.create(other.id, {'min_trips': 0, 'max_trips': 10, 'payout_amount': 5})
        assert slab.id is not None

    def test_update_excludes_itself_from_overlap_check(self, db):
        owner = make_owner()
        rows = make_slabs(owner)
        slab = SlabService.update(owner.id, rows[1].id, {'payout_amount': 55000})
        assert slab.payout_amount == 55000

    def test_update_inverted_range(self, db):
        owner = make_owner()
        rows = make_slabs(owner)
        with pytest.raises(ServiceError):
            SlabService.update(owner.id, rows[1].id, {'max_trips': 10})

    def test_update_foreign_slab(self, db):
        rows = make_slabs(make_owner())
        other = make_owner("Other Owner")
        assert SlabService.update(other.id, rows[0].id, {'payout_amount': 1}) is None
        assert SlabService.delete(other.id, rows[0].id) is False

    def test_delete_leaves_gap_reported_by_validate(self, db):
        owner = make_owner()
        rows = make_slabs(owner)
        assert SlabService.validate(owner.id) == {'valid': True, 'problems': []}
        assert SlabService.delete(owner.id, rows[1].id) is True
        report = SlabService.validate(owner.id)
        assert report['valid'] is False
        assert report['problems'] == ["No slab covers 50-99 trips"]
