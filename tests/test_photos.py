"""
Tests for the photo collection and batch results.
"""
import pytest

from expose_builder.models.photos import MAX_PHOTOS, PhotoBatchResult, PhotoCollection


@pytest.fixture
def abcd():
    return PhotoCollection(('a', 'b', 'c', 'd'))


class TestPhotoCollection:

    def test_is_capped(self):
        collection = PhotoCollection(tuple(str(i) for i in range(20)))
        assert len(collection) == MAX_PHOTOS
        assert collection.remaining == 0

    def test_extend_discards_overflow(self):
        collection = PhotoCollection(tuple(str(i) for i in range(10)))
        extended = collection.extend(['x', 'y', 'z'])
        assert extended.to_list()[-2:] == ['x', 'y']
        assert len(extended) == MAX_PHOTOS
        assert len(collection) == 10

    def test_plan_batch(self):
        collection = PhotoCollection(tuple(str(i) for i in range(10)))
        assert collection.plan_batch(5) == (2, 3)
        assert collection.plan_batch(5, reserved=1) == (1, 4)
        assert collection.plan_batch(1) == (1, 0)
        assert PhotoCollection(tuple('x' * 12)).plan_batch(3) == (0, 3)

    def test_move(self, abcd):
        assert abcd.move(0, 2).to_list() == ['b', 'c', 'a', 'd']
        assert abcd.move(3, 0).to_list() == ['d', 'a', 'b', 'c']
        assert abcd.move(0, 9) is abcd

    def test_step(self, abcd):
        assert abcd.step(1, -1).to_list() == ['b', 'a', 'c', 'd']
        assert abcd.step(1, 1).to_list() == ['a', 'c', 'b', 'd']
        assert abcd.step(0, -1) is abcd
        assert abcd.step(3, 1) is abcd

    def test_remove(self, abcd):
        assert abcd.remove(1).to_list() == ['a', 'c', 'd']
        assert abcd.remove(7) is abcd
        assert abcd.remove_selected({0, 2}).to_list() == ['b', 'd']

    def test_promote(self, abcd):
        assert abcd.promote(2).to_list() == ['c', 'a', 'b', 'd']
        assert abcd.promote(0) is abcd

    @pytest.mark.parametrize('title_index, expected', [
        (None, 0), ('', 0), ('2', 2), (3, 3), ('9', 0), ('-1', 0), ('1.5', 0), ('abc', 0),
    ])
    def test_cover_index(self, abcd, title_index, expected):
        assert abcd.cover_index(title_index) == expected

    def test_empty_collection_has_no_cover(self):
        assert PhotoCollection().cover_index('1') is None
        assert PhotoCollection().cover() is None


class TestPhotoBatchResult:

    def test_no_message_when_everything_fit(self):
        result = PhotoBatchResult(requested=2, accepted=2)
        assert result.message() is None

    def test_limit_reached(self):
        result = PhotoBatchResult(requested=3, accepted=0, dropped=3)
        assert result.message('de') == 'Maximal 12 Bilder erreicht.'
        assert result.message('en') == 'Maximum of 12 photos reached.'

    def test_partially_accepted(self):
        result = PhotoBatchResult(requested=5, accepted=2, dropped=3)
        assert result.message('de') == 'Es wurden nur 2 von 5 Bildern übernommen (Limit 12).'

    def test_counts(self):
        result = PhotoBatchResult(requested=3, accepted=3)
        result.add_success('data:image/jpeg;base64,AAAA')
        result.add_failure('broken.jpg', 'Cannot decode image')
        data = result.to_dict()
        assert data['processed'] == 1
        assert data['failed'] == 1
        assert data['failures'][0]['name'] == 'broken.jpg'
        assert 'processed=1' in str(result)
