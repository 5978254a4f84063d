import pytest
from acefitlib.parallel_tools import ParallelTools
from acefitlib.io.input import Config
from acefitlib.io.sections.sections import strtobool


def make_config(settings, args=("--overwrite",)):
    return Config(ParallelTools(), settings, arguments_lst=list(args))


def test_defaults():
    config = make_config({"SOLVER": {"solver": "SVD"}})
    data = config.sections["DATA"]
    assert data.energy_key == "energy"
    assert data.force_key == "forces"
    assert data.virial_key == "virial"
    assert data.pae_key is None
    assert data.mask_key is None
    assert data.group_key == "config_type"
    assert config.sections["GROUPS"].weights == {"default": {"E": 30.0, "F": 1.0, "V": 1.0}}
    assert "OUTFILE" not in config.sections


def test_disabled_observable():
    config = make_config({"DATA": {"virial_key": "None", "pae_key": "DFT_pae"}})
    keys = config.sections["DATA"].record_keys()
    assert keys["virial_key"] is None
    assert keys["pae_key"] == "DFT_pae"


def test_unknown_key_raises():
    with pytest.raises(RuntimeError):
        make_config({"DATA": {"energy_keyy": "energy"}})


def test_unknown_section_raises():
    with pytest.raises(IndexError):
        make_config({"BISPECTRUM": {"twojmax": 6}})


def test_group_weights():
    config = make_config({"GROUPS": {"default": "10.0 1.0 1.0", "liquid": "5 2 0.1"}})
    weights = config.sections["GROUPS"].weights
    assert weights["default"] == {"E": 10.0, "F": 1.0, "V": 1.0}
    assert weights["liquid"] == {"E": 5.0, "F": 2.0, "V": 0.1}


def test_bad_group_line():
    with pytest.raises(ValueError):
        make_config({"GROUPS": {"liquid": "5 2"}})


def test_reference_and_elements():
    config = make_config({"REFERENCE": {"Si": -158.5, "O": -432.0},
                          "CALCULATOR": {"calculator": "ONEBODY"}})
    assert config.sections["REFERENCE"].E0s == {"Si": -158.5, "O": -432.0}
    assert config.sections["CALCULATOR"].elements == ["Si", "O"]


def test_reference_rejects_non_elements():
    with pytest.raises(RuntimeError):
        make_config({"REFERENCE": {"Xx": 1.0}})


def test_input_file_and_keyword_replacement(tmp_path):
    infile = tmp_path / "fit.in"
    infile.write_text("[DATA]\n"
                      "energy_key = DFT_energy  # inline comment\n"
                      "[SOLVER]\n"
                      "solver = SVD\n"
                      "[RIDGE]\n"
                      "alpha = 1e-3\n")
    config = Config(ParallelTools(), str(infile),
                    arguments_lst=["--overwrite", "-k", "SOLVER", "solver", "RIDGE"])
    assert config.sections["DATA"].energy_key == "DFT_energy"
    assert config.sections["SOLVER"].solver == "RIDGE"
    assert config.sections["RIDGE"].alpha == pytest.approx(1e-3)
    assert config.convert_to_dict(original_input=True)["SOLVER"]["solver"] == "RIDGE"


def test_missing_input_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(ParallelTools(), str(tmp_path / "missing.in"), arguments_lst=["--overwrite"])


def test_existing_output_needs_overwrite(tmp_path):
    (tmp_path / "pot.acecoeff").write_text("1.0\n")
    settings = {"OUTFILE": {"potential": str(tmp_path / "pot"), "metrics": str(tmp_path / "m.md")}}
    with pytest.raises(FileExistsError):
        make_config(settings, args=["--verbose"])
    config = make_config(settings)
    assert config.sections["OUTFILE"].potential_name == str(tmp_path / "pot")


def test_strtobool():
    assert strtobool("Yes") is True
    assert strtobool("0") is False
    with pytest.raises(ValueError):
        strtobool("maybe")
