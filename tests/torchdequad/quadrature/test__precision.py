import pytest

from torchdequad.quadrature import (
    FAST,
    PRECISE,
    PRECISION_PROFILES,
    PrecisionProfile,
    resolve_precision,
)


class TestPrecisionProfiles:
    def test_constants(self):
        assert PRECISE == PrecisionProfile(10.0, 1.0)
        assert FAST == PrecisionProfile(160.0, 16.0)

    def test_named_lookup(self):
        assert set(PRECISION_PROFILES) == {"precise", "fast"}
        assert resolve_precision("precise") is PRECISE
        assert resolve_precision("fast") is FAST

    def test_lookup_is_case_insensitive(self):
        assert resolve_precision("FAST") is FAST

    def test_custom_profile_passes_through(self):
        profile = PrecisionProfile(fudge1=40.0, fudge2=4.0)

        assert resolve_precision(profile) is profile

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown precision"):
            resolve_precision("sloppy")

    @pytest.mark.parametrize("fudge1, fudge2", [(0.0, 1.0), (10.0, -1.0)])
    def test_non_positive_fudge_raises(self, fudge1, fudge2):
        with pytest.raises(ValueError, match="positive"):
            resolve_precision(PrecisionProfile(fudge1, fudge2))

    def test_wrong_type_raises(self):
        with pytest.raises(TypeError, match="PrecisionProfile"):
            resolve_precision((10.0, 1.0, 2.0))
