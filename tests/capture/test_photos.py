import pytest
from cropverify.capture.photos import PhotoSet


def test_append_stops_at_cap():
    ps = PhotoSet(max_photos=3)
    for i in range(3):
        ps.append(b"jpeg-%d" % i, 1000 + i)
    assert ps.is_full

    # Fourth capture at the cap leaves the set unchanged
    photos = ps.append(b"jpeg-3", 2000)
    assert len(photos) == 3
    assert [p.data for p in photos] == [b"jpeg-0", b"jpeg-1", b"jpeg-2"]


def test_remove_last_and_empty_noop():
    ps = PhotoSet(max_photos=3)
    assert ps.remove_last() == ()
    ps.append(b"a", 1)
    ps.append(b"b", 2)
    photos = ps.remove_last()
    assert [p.data for p in photos] == [b"a"]


def test_remove_at_reindexes():
    ps = PhotoSet(max_photos=3)
    for blob in (b"a", b"b", b"c"):
        ps.append(blob, 1)
    photos = ps.remove_at(0)
    assert [(p.index, p.data) for p in photos] == [(0, b"b"), (1, b"c")]
    assert not ps.is_full


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_remove_at_out_of_range(index):
    ps = PhotoSet(max_photos=3)
    ps.append(b"a", 1)
    ps.append(b"b", 2)
    with pytest.raises(IndexError):
        ps.remove_at(index)
    assert len(ps) == 2


def test_default_cap_from_settings():
    assert PhotoSet().max_photos == 3
