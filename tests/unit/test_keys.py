"""
Tests for the key scheme (core/keys.py).

Key functions are pure, so these tests only check the exact strings they
build and that padded ordering sorts the same way as the numbers.
"""

from portfolio_store.core import keys
from portfolio_store.models import CarouselStatus, ProjectStatus


class TestProjectKeys:
    """Test project primary, index and ref keys."""

    def test_project_keys_use_date_part(self):
        """Only the date of an ISO timestamp goes into the sort key."""
        result = keys.project_keys("mountain-series", "2024-06-10T08:30:00.000000+00:00")

        assert result == {'PK': 'PROJECT', 'SK': 'PROJECT#2024-06-10#mountain-series'}

    def test_project_keys_accept_plain_date(self):
        assert keys.project_keys("a", "2024-06-10") == keys.project_keys("a", "2024-06-10T23:59:59")

    def test_project_keys_deterministic(self):
        first = keys.project_keys("mountain-series", "2024-06-10")
        second = keys.project_keys("mountain-series", "2024-06-10")

        assert first == second

    def test_project_index_keys(self):
        result = keys.project_index_keys("published", "landscape", "2024-06-10T08:30:00.000000+00:00")

        assert result == {
            'GSI1PK': 'PROJECT#STATUS#published',
            'GSI1SK': '2024-06-10T08:30:00.000000+00:00',
            'GSI2PK': 'PROJECT#CATEGORY#landscape',
            'GSI2SK': '2024-06-10T08:30:00.000000+00:00',
        }

    def test_project_ref_keys(self):
        """Ref row lives in the project's own partition."""
        assert keys.project_ref_keys("mountain-series") == {'PK': 'PROJECT#mountain-series', 'SK': '#META'}


class TestImageKeys:
    """Test image primary and index keys."""

    def test_image_keys_pad_sort_order(self):
        result = keys.image_keys("mountain-series", 7, "img-1")

        assert result == {'PK': 'PROJECT#mountain-series', 'SK': 'IMAGE#007#img-1'}

    def test_image_keys_custom_width(self):
        assert keys.image_keys("p", 7, "i", width=5)['SK'] == 'IMAGE#00007#i'

    def test_image_index_keys(self):
        result = keys.image_index_keys("draft", True, "2024-01-01T00:00:00.000000+00:00")

        assert result['GSI1PK'] == 'IMAGE#STATUS#draft'
        assert result['GSI2PK'] == 'IMAGE#FEATURED#true'
        assert result['GSI1SK'] == result['GSI2SK'] == '2024-01-01T00:00:00.000000+00:00'

    def test_image_featured_partition_false(self):
        assert keys.image_featured_partition(False) == 'IMAGE#FEATURED#false'


class TestCarouselKeys:
    """Test carousel primary and index keys."""

    def test_carousel_keys(self):
        assert keys.carousel_keys(12, "slide-1") == {'PK': 'CAROUSEL', 'SK': 'ITEM#012#slide-1'}

    def test_carousel_index_keys(self):
        result = keys.carousel_index_keys("active", 3)

        assert result == {'GSI1PK': 'CAROUSEL#STATUS#active', 'GSI1SK': '003'}
        assert 'GSI2PK' not in result


class TestOrdering:
    """Test zero-padded ordering helpers."""

    def test_padded_values_sort_numerically(self):
        values = [10, 2, 100, 1, 99]

        padded = sorted(keys.pad_ordering(v) for v in values)

        assert padded == ['001', '002', '010', '099', '100']

    def test_max_ordering_value(self):
        assert keys.max_ordering_value(3) == 999
        assert keys.max_ordering_value(1) == 9

    def test_sequence_keys(self):
        assert keys.sequence_keys('PROJECT#p', 'IMAGE') == {'PK': 'PROJECT#p', 'SK': '#SEQUENCE#IMAGE'}

    def test_primary_key_extracts_pk_sk(self):
        item = {'PK': 'CAROUSEL', 'SK': 'ITEM#001#a', 'Title': 'x', 'GSI1PK': 'y'}

        assert keys.primary_key(item) == {'PK': 'CAROUSEL', 'SK': 'ITEM#001#a'}


class TestStatusTokens:
    """Status partitions hold the plain status value."""

    def test_enum_members_render_as_values(self):
        assert keys.project_status_partition(ProjectStatus.DRAFT) == 'PROJECT#STATUS#draft'
        assert keys.image_status_partition(ProjectStatus.PUBLISHED) == 'IMAGE#STATUS#published'
        assert keys.carousel_index_keys(CarouselStatus.ACTIVE, 2)['GSI1PK'] == 'CAROUSEL#STATUS#active'

    def test_strings_pass_through(self):
        assert keys.value_token('draft') == 'draft'
