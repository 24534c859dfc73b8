from dataclasses import fields

import pytest

from bucketwire.aws.function import FunctionConfig, FunctionConfigDict


def test_function_config_dict_has_same_fields_as_function_config():
    assert {f.name for f in fields(FunctionConfig)} == set(FunctionConfigDict.__annotations__)


@pytest.mark.parametrize(
    ("handler", "match"),
    [
        (
            "missing_dot",
            "Handler must contain a dot separator between file path and function name",
        ),
        ("file.", "Both file path and function name must be non-empty"),
        (".function", "Both file path and function name must be non-empty"),
        ("file..function", "File path part should not contain dots"),
        ("two::doublecolon::separators", "Handler can only contain one :: separator"),
        ("one.two::file.function", "Folder path should not contain dots"),
    ],
)
def test_function_config_invalid_handler_format(handler, match):
    with pytest.raises(ValueError, match=match):
        FunctionConfig(handler=handler)


def test_function_config_folder_handler_conflict():
    with pytest.raises(ValueError, match="Cannot specify both 'folder' and use '::' in handler"):
        FunctionConfig(handler="folder::file.function", folder="another_folder")


def test_function_config_invalid_folder_path():
    with pytest.raises(ValueError, match="Folder path should not contain dots"):
        FunctionConfig(handler="file.function", folder="path.with.dots")


@pytest.mark.parametrize(
    ("handler", "folder", "expected_folder_path"),
    [
        ("file.function", None, None),
        ("file.function", "my_folder", "my_folder"),
        ("my_folder/subfolder::file.function", None, "my_folder/subfolder"),
    ],
)
def test_function_config_folder_path(handler, folder, expected_folder_path):
    config = FunctionConfig(handler=handler, folder=folder)
    assert config.folder_path == expected_folder_path


@pytest.mark.parametrize(
    ("handler", "expected_file_path", "expected_handler_format"),
    [
        ("file.function", "file", "file.function"),
        ("path/to/file.function", "path/to/file", "file.function"),
        ("folder::file.function", "file", "file.function"),
        ("folder::subfolder/file.function", "subfolder/file", "subfolder/file.function"),
    ],
)
def test_function_config_handler_paths(handler, expected_file_path, expected_handler_format):
    config = FunctionConfig(handler=handler)

    assert config.handler_file_path == expected_file_path
    assert config.handler_format == expected_handler_format


@pytest.mark.parametrize(
    ("opts", "match"),
    [
        ({"memory": 64}, "memory must be between 128 and 10240 MB, got 64"),
        ({"memory": 20000}, "memory must be between 128 and 10240 MB, got 20000"),
        ({"timeout": 0}, "timeout must be between 1 and 900 seconds, got 0"),
        ({"timeout": 901}, "timeout must be between 1 and 900 seconds, got 901"),
        ({"runtime": "python2.7"}, "Unsupported runtime 'python2.7'"),
        ({"architecture": "sparc"}, "Unsupported architecture 'sparc'"),
        ({"policies": ["not-an-arn"]}, "Item at index 0 in 'policies' is not a policy ARN"),
    ],
)
def test_function_config_rejects_invalid_options(opts, match):
    with pytest.raises(ValueError, match=match):
        FunctionConfig(handler="file.function", **opts)


def test_function_config_rejects_policies_not_in_list():
    with pytest.raises(TypeError, match="'policies' must be a list of policy ARNs, got str"):
        FunctionConfig(handler="file.function", policies="arn:aws:iam::aws:policy/ReadOnly")


def test_function_config_default_values():
    config = FunctionConfig(handler="file.function")

    assert config.memory is None
    assert config.timeout is None
    assert config.environment == {}
    assert config.policies == []


def test_function_config_immutability():
    config = FunctionConfig(handler="file.function")
    with pytest.raises(AttributeError):
        # noinspection PyDataclass
        config.handler = "another.function"
