import matplotlib
import pytest

matplotlib.use("Agg")

READ_1 = (
    b"Query: read/1:a b\n"
    b"l:50,k:10\n"
    b"Forward-strand anchor hits:[{100,0}{190,20}{204,30}]\n"
    b"Reverse-strand anchor hits:[{500,5}]\n"
    b"chains["
    b"{ref_id:3,score:41.5,query_start:0,query_end:40,ref_start:100,ref_end:200,"
    b"is_revcomp:false,anchors:[{190,20}{100,0}]}"
    b"{ref_id:1,score:12,query_start:5,query_end:15,ref_start:500,ref_end:510,"
    b"is_revcomp:true,anchors:[{500,5}]}"
    b"]\n"
)
DETAILS_1 = (
    b"cigars:[(3M2I2D,was_considered:1,rstart:10,ssw:50M,ssw_rstart:120)"
    b"(,was_considered:0,rstart:500,ssw:,ssw_rstart:0)]\n"
)
EMPTY = (
    b"Query: empty\n"
    b"l:30,k:10\n"
    b"Forward-strand anchor hits:[{1,1}]\n"
    b"Reverse-strand anchor hits:[]\n"
    b"chains[]\n"
)
READ_3 = (
    b"Query: r3\n"
    b"l:20,k:5\n"
    b"Forward-strand anchor hits:[]\n"
    b"Reverse-strand anchor hits:[]\n"
    b"chains[{ref_id:0,score:7.25,query_start:0,query_end:20,ref_start:0,ref_end:20,"
    b"is_revcomp:false,anchors:[]}]\n"
)
DETAILS_3 = b"cigars:[(20M,was_considered:0,rstart:0,ssw:20M,ssw_rstart:0)]\n"


@pytest.fixture
def read_1() -> bytes:
    """Two-chain record without its detail list."""
    return READ_1


@pytest.fixture
def details_1() -> bytes:
    return DETAILS_1


@pytest.fixture
def empty_read() -> bytes:
    """Record whose chain list is empty."""
    return EMPTY


@pytest.fixture
def full_trace() -> bytes:
    return b"log line before\n" + READ_1 + DETAILS_1 + EMPTY + b"cigars:[]\n" + READ_3 + DETAILS_3


@pytest.fixture
def mapping_trace() -> bytes:
    return READ_1 + EMPTY + READ_3
