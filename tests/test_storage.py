"""
썸네일 저장소 테스트
"""

from storage.thumbnails import ThumbnailStore


def test_save_and_get(thumbnails):
    thumbnails.save_collection_thumbnail("owner/obs", b"\xff\xd8data")
    assert thumbnails.get_collection_thumbnail("owner/obs") == b"\xff\xd8data"


def test_missing_thumbnail(thumbnails):
    assert thumbnails.get_collection_thumbnail("owner/none") is None


def test_similar_ids_do_not_collide(thumbnails):
    """정리 후 같은 이름이 되는 ID도 별도 파일"""
    thumbnails.save_collection_thumbnail("owner/a b", b"1")
    thumbnails.save_collection_thumbnail("owner/a_b", b"2")

    assert thumbnails.get_collection_thumbnail("owner/a b") == b"1"
    assert thumbnails.get_collection_thumbnail("owner/a_b") == b"2"


def test_delete(thumbnails):
    thumbnails.save_collection_thumbnail("owner/obs", b"x")
    assert thumbnails.delete_collection_thumbnail("owner/obs")
    assert not thumbnails.delete_collection_thumbnail("owner/obs")


def test_paths_stay_inside_base_dir(temp_dir):
    store = ThumbnailStore(temp_dir)
    path = store.save_collection_thumbnail("../../etc/passwd", b"x")
    assert path.parent == temp_dir
