"""
Enumerations accepted by the metadata accessor and expression loader.

Each enum parses user-facing strings through `parse`, which raises
ConfigurationError listing the accepted values.
"""

from enum import Enum

from usq_utils.errors import ConfigurationError


def _invalid(parameter, value, valid):
    return ConfigurationError(
        f"{parameter} must be one of the following: {', '.join(valid)} (got {value!r})"
    )


class CategoryGroup(Enum):
    """Sample category (type x quality tier) with its tidy and raw-table labels."""

    NON_UC_HIGH_QUALITY = ('non_uc_high_quality', 'Non_UC_High_Quality')
    NON_UC_LOW_QUALITY = ('non_uc_low_quality', 'Non_UC_Low_Quality')
    RECURRENCE_HIGH_QUALITY = ('recurrence_high_quality', 'Recurrence_High_Quality')
    REPLICATE_HIGH_QUALITY = ('replicate_high_quality', 'Replicate_High_Quality')
    REPLICATE_LOW_QUALITY = ('replicate_low_quality', 'Replicate_Low_Quality')
    UC_INDEX_HIGH_QUALITY = ('uc_index_high_quality', 'UC_index_High_Quality')
    # The raw table spells this label with a lowercase "c"
    UC_INDEX_LOW_QUALITY = ('uc_index_low_quality', 'Uc_index_Low_Quality')
    NONE = ('none', 'none')

    def __init__(self, label, raw):
        self.label = label
        self._raw = raw

    def __str__(self):
        return self.label

    def raw_label(self) -> str:
        """Label used in the raw table's CategoryGroup column."""
        return self._raw

    @property
    def is_filter(self) -> bool:
        return self is not CategoryGroup.NONE

    @classmethod
    def parse(cls, value) -> 'CategoryGroup':
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        for member in cls:
            if member.label == value:
                return member
        raise _invalid('category_group', value, [m.label for m in cls])


INDEX_TUMOR_GROUPS = (CategoryGroup.UC_INDEX_LOW_QUALITY, CategoryGroup.UC_INDEX_HIGH_QUALITY)


class ReturnShape(Enum):
    TIDY = 'tidy'
    RAW = 'raw'
    PUBLICATION = 'publication'
    CHANGE_LOG = 'change_log'
    FULL_STORE = 'full_store'
    EVERYTHING = 'everything'
    EXPRESSIONS_ONLY = 'expressions_only'

    @classmethod
    def parse(cls, value) -> 'ReturnShape':
        if isinstance(value, cls):
            return value
        value = _SHAPE_ALIASES.get(value, value)
        for member in cls:
            if member.value == value:
                return member
        raise _invalid('return_shape', value, [m.value for m in cls])


# Tokens used by earlier releases of the package
_SHAPE_ALIASES = {
    'pub': 'publication',
    'full_meta': 'full_store',
    'only_expressions': 'expressions_only',
}


class SampleSet(Enum):
    HIGH_QUALITY = 'USQ-HQ'
    ALL = 'USQ-ALL'

    @classmethod
    def parse(cls, value) -> 'SampleSet':
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise _invalid('sample_set', value, [m.value for m in cls])

    @classmethod
    def for_category(cls, category_group) -> 'SampleSet':
        # Only uc_index_high_quality selects the 533-sample matrix; every other
        # category (recurrence_high_quality included) uses the 662-sample one.
        if category_group is CategoryGroup.UC_INDEX_HIGH_QUALITY:
            return cls.HIGH_QUALITY
        return cls.ALL


class GeneIdScheme(Enum):
    HGNC = 'hgnc_symbol'
    ENSEMBL = 'ensembl_gene_id'

    @classmethod
    def parse(cls, value) -> 'GeneIdScheme':
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise _invalid('gene_id', value, [m.value for m in cls])
