import pytest


def test_lazy_imports_and_caching():
    import intellicommit  # triggers intellicommit.__getattr__

    # First access loads and caches
    engine_cls = intellicommit.CommitEngine
    from intellicommit.engine import CommitEngine as RealEngine

    assert engine_cls is RealEngine
    # Second access should use cached value
    assert intellicommit.CommitEngine is RealEngine
    assert intellicommit.InvalidInput is intellicommit.ValidationError


def test_unknown_attribute_raises():
    import intellicommit

    with pytest.raises(AttributeError):
        getattr(intellicommit, "TotallyUnknownSymbol")


def test_version_is_exposed():
    import intellicommit

    assert intellicommit.__version__
