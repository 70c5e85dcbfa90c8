from hoarder.version import SEMVER_ALPHABET, VersionInfo, normalize_ver_string


def test_normalize_keeps_valid_string():
    assert normalize_ver_string("rc1.beta-2") == "rc1.beta-2"


def test_normalize_strips_invalid_characters():
    assert normalize_ver_string("a b!c") == "abc"


def test_normalize_result_is_within_alphabet_and_idempotent():
    raw = "x_y+z/1.2~ü-é"
    cleaned = normalize_ver_string(raw)
    assert all(ch in SEMVER_ALPHABET for ch in cleaned)
    assert normalize_ver_string(cleaned) == cleaned


def test_default_version_string():
    assert VersionInfo().string() == "1.0.0-dev"


def test_build_metadata_appended():
    info = VersionInfo(build_metadata="abc123")
    assert info.string().endswith("-dev+abc123")


def test_invalid_prerelease_is_dropped():
    info = VersionInfo(pre_release="!!!")
    assert "-" not in info.string()
    assert info.string().startswith(f"{info.major}.{info.minor}.{info.patch}")


def test_build_info_includes_brand_and_component():
    info = VersionInfo(brand="brand", component="hoarderd")
    text = info.build_info()
    assert text.startswith("v" + info.string() + " (brand, hoarderd, ")
    assert text.endswith(")")


def test_build_info_without_brand():
    info = VersionInfo()
    text = info.build_info()
    assert text.startswith("v" + info.string() + " (")
    assert ", " not in text