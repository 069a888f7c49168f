import pytest

from stage_deployer.errors import ConfigurationError
from stage_deployer.project import Project

PROJECT_YAML = """
name: shop
stages:
  dev:
    regions:
      us-east-1:
        variables:
          iamRoleArnLambda: arn:aws:iam::123456789012:role/lambda
          ttl: 300
functions:
  auth:
    customName: ${project}-${stage}-auth
    authorizer:
      identitySource: method.request.header.Auth
      authorizerResultTtlInSeconds: ${ttl}
  orders:
    handler: orders.handler
"""


def test_load_project_from_yaml(tmp_path):
    path = tmp_path / "s-project.yaml"
    path.write_text(PROJECT_YAML)

    project = Project.load(str(path))

    assert [f.name for f in project.get_all_functions()] == ["auth", "orders"]
    variables = project.get_region("dev", "us-east-1").get_variables()
    assert variables["iamRoleArnLambda"] == "arn:aws:iam::123456789012:role/lambda"


def test_to_object_populated_substitutes_variables(tmp_path):
    path = tmp_path / "s-project.yaml"
    path.write_text(PROJECT_YAML)
    auth = Project.load(str(path)).get_all_functions()[0]

    populated = auth.to_object_populated("dev", "us-east-1")

    assert populated.custom_name == "shop-dev-auth"
    assert populated.deployed_name == "shop-dev-auth"
    # A lone reference keeps the variable's type
    assert populated.authorizer["authorizerResultTtlInSeconds"] == 300
    # The original definition is untouched
    assert auth.custom_name == "${project}-${stage}-auth"
    assert auth.authorizer["authorizerResultTtlInSeconds"] == "${ttl}"


def test_region_variables_override_stage_and_project(project_data):
    project_data["variables"]["tokenHeader"] = "Project"
    project_data["stages"]["dev"]["regions"]["us-east-1"]["variables"]["tokenHeader"] = "Region"
    auth = Project.from_dict(project_data).get_all_functions()[0]

    populated = auth.to_object_populated("dev", "us-east-1")

    assert populated.authorizer["identitySource"] == "method.request.header.Region"


def test_unknown_variable_raises(project_data):
    project_data["functions"][0]["authorizer"]["identitySource"] = "${missing}"
    auth = Project.from_dict(project_data).get_all_functions()[0]

    with pytest.raises(ConfigurationError, match="missing"):
        auth.to_object_populated("dev", "us-east-1")


def test_get_region_unknown_stage_or_region(project):
    with pytest.raises(ConfigurationError, match="Stage prod"):
        project.get_region("prod", "us-east-1")
    with pytest.raises(ConfigurationError, match="Region ap-south-1"):
        project.get_region("dev", "ap-south-1")


def test_missing_project_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        Project.load(str(tmp_path / "nope.yaml"))


def test_project_root_must_be_mapping(tmp_path):
    path = tmp_path / "s-project.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError):
        Project.load(str(path))


def test_function_without_name_is_rejected():
    with pytest.raises(ConfigurationError):
        Project.from_dict({"name": "shop", "functions": [{"handler": "x.y"}]})


def test_mapping_form_function_body_must_be_mapping():
    with pytest.raises(ConfigurationError, match="Function auth must be a mapping"):
        Project.from_dict({"name": "shop", "functions": {"auth": "x"}})


def test_mapping_form_function_without_body():
    project = Project.from_dict({"name": "shop", "functions": {"orders": None}})
    assert [f.name for f in project.get_all_functions()] == ["orders"]


def test_extra_function_keys_are_not_substituted(project_data):
    project_data["functions"][1]["handler"] = "${undefined}"
    orders = Project.from_dict(project_data).get_all_functions()[1]

    populated = orders.to_object_populated("dev", "us-east-1")

    assert populated.deployed_name == "orders"
    assert populated.authorizer == {}
