import pytest

from pyfeast import ContourChunk, FeastInputError, FeastStatus, distribute_contour_points


def test_balanced_contiguous_chunks():
    chunks = distribute_contour_points(8, 3)
    assert [len(chunk) for chunk in chunks] == [3, 3, 2]
    assert [chunk.chunk_id for chunk in chunks] == [0, 1, 2]
    assert [index for chunk in chunks for index in chunk] == list(range(8))


@pytest.mark.parametrize("nodes, workers", [(8, 1), (8, 8), (16, 5), (7, 2)])
def test_partition_covers_every_node_once(nodes, workers):
    chunks = distribute_contour_points(nodes, workers)
    sizes = [len(chunk) for chunk in chunks]
    assert sum(sizes) == nodes
    assert len(chunks) == workers
    assert max(sizes) - min(sizes) <= 1


def test_fewer_nodes_than_workers_gives_single_node_chunks():
    chunks = distribute_contour_points(3, 5)
    assert chunks == [ContourChunk(0, (0,)), ContourChunk(1, (1,)), ContourChunk(2, (2,))]


def test_invalid_counts_raise():
    with pytest.raises(FeastInputError) as excinfo:
        distribute_contour_points(8, 0)
    assert excinfo.value.status == FeastStatus.ERROR_FPM
    with pytest.raises(FeastInputError):
        distribute_contour_points(0, 2)
