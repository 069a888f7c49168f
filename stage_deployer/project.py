"""
Project model

Loads the project definition (functions, stages, regions and their
variables) from a YAML file and resolves ${variable} references for a
given stage and region.
"""

import copy
import logging
import os
import re
from typing import Any, Dict, List, Optional

import yaml

from stage_deployer.errors import ConfigurationError

logger = logging.getLogger(__name__)

VARIABLE_PATTERN = re.compile(r'\$\{([A-Za-z0-9_.\-]+)\}')


class Region:
    """A region of a stage with its own deployment variables."""

    def __init__(self, stage: str, name: str, variables: Optional[Dict[str, Any]] = None):
        self.stage = stage
        self.name = name
        self.variables = variables or {}

    def get_variables(self) -> Dict[str, Any]:
        return self.variables


class Stage:
    """A named deployment environment and its regions."""

    def __init__(self, name: str, variables: Optional[Dict[str, Any]] = None,
                 regions: Optional[Dict[str, Region]] = None):
        self.name = name
        self.variables = variables or {}
        self.regions = regions or {}


class FunctionDefinition:
    """A Lambda function declared by the project."""

    def __init__(self, project: 'Project', name: str, custom_name: str = None,
                 authorizer: Optional[Dict[str, Any]] = None):
        self.project = project
        self.name = name
        self.custom_name = custom_name
        self.authorizer = authorizer or {}

    def to_object_populated(self, stage: str, region: str) -> 'FunctionDefinition':
        """Return a copy of this function with stage/region variables substituted."""
        variables = self.project.get_populate_variables(stage, region)
        populated = FunctionDefinition(
            self.project,
            name=_populate(self.name, variables, self.name),
            custom_name=_populate(self.custom_name, variables, self.name),
            authorizer=_populate(copy.deepcopy(self.authorizer), variables, self.name)
        )
        return populated

    @property
    def deployed_name(self) -> str:
        """Name of the function as deployed to Lambda."""
        return self.custom_name or self.name

    def __repr__(self) -> str:
        return f"FunctionDefinition(name={self.name!r})"


class Project:
    """Functions, stages and regions of a project."""

    def __init__(self, name: str, functions: List[Dict[str, Any]] = None,
                 stages: Dict[str, Stage] = None, variables: Optional[Dict[str, Any]] = None):
        self.name = name
        self.variables = variables or {}
        self.stages = stages or {}
        self.functions = [self._build_function(f) for f in (functions or [])]

    def _build_function(self, data: Dict[str, Any]) -> FunctionDefinition:
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Function entries must be mappings in project {self.name}")
        data = dict(data)
        name = data.pop('name', None)
        if not name:
            raise ConfigurationError(f"Function without a name in project {self.name}")
        custom_name = data.pop('customName', None)
        authorizer = data.pop('authorizer', None)
        if authorizer is not None and not isinstance(authorizer, dict):
            raise ConfigurationError(
                f"Authorizer of function {name} must be a mapping")
        return FunctionDefinition(self, name, custom_name, authorizer)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        """Build a project from its parsed YAML representation."""
        if not isinstance(data, dict):
            raise ConfigurationError("Project definition must be a mapping")

        stages = {}
        for stage_name, stage_data in (data.get('stages') or {}).items():
            stage_data = stage_data or {}
            regions = {}
            for region_name, region_data in (stage_data.get('regions') or {}).items():
                regions[region_name] = Region(
                    stage_name, region_name, (region_data or {}).get('variables'))
            stages[stage_name] = Stage(
                stage_name, stage_data.get('variables'), regions)

        functions = data.get('functions') or []
        if isinstance(functions, dict):
            # Mapping form: {name: {...}} keeps file order
            entries = []
            for name, body in functions.items():
                body = body or {}
                if not isinstance(body, dict):
                    raise ConfigurationError(
                        f"Function {name} must be a mapping")
                entries.append(dict(body, name=body.get('name', name)))
            functions = entries

        return cls(
            name=data.get('name', 'project'),
            functions=functions,
            stages=stages,
            variables=data.get('variables')
        )

    @classmethod
    def load(cls, path: str) -> 'Project':
        """Load the project definition from a YAML file."""
        logger.info(f"Loading project from: {path}")

        if not os.path.exists(path):
            raise ConfigurationError(f"Project file not found at {path}")

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read project file {path}: {e}") from e

        return cls.from_dict(data)

    def get_all_functions(self) -> List[FunctionDefinition]:
        return list(self.functions)

    def get_stage(self, stage: str) -> Stage:
        if stage not in self.stages:
            raise ConfigurationError(
                f"Stage {stage} is not defined in project {self.name}")
        return self.stages[stage]

    def get_region(self, stage: str, region: str) -> Region:
        stage_obj = self.get_stage(stage)
        if region not in stage_obj.regions:
            raise ConfigurationError(
                f"Region {region} is not defined in stage {stage}")
        return stage_obj.regions[region]

    def get_populate_variables(self, stage: str, region: str) -> Dict[str, Any]:
        """Variables visible to ${...} references, later sources win."""
        variables = dict(self.variables)
        variables.update({'project': self.name, 'stage': stage, 'region': region})
        variables.update(self.get_stage(stage).variables)
        variables.update(self.get_region(stage, region).get_variables())
        return variables


def _populate(value: Any, variables: Dict[str, Any], function_name: str) -> Any:
    if isinstance(value, dict):
        return {k: _populate(v, variables, function_name) for k, v in value.items()}
    if isinstance(value, list):
        return [_populate(v, variables, function_name) for v in value]
    if not isinstance(value, str):
        return value

    def lookup(name: str) -> Any:
        if name not in variables:
            raise ConfigurationError(
                f"Variable {name} is not defined (function {function_name})")
        return variables[name]

    # A lone reference keeps the variable's type
    whole = VARIABLE_PATTERN.fullmatch(value)
    if whole:
        return lookup(whole.group(1))

    return VARIABLE_PATTERN.sub(lambda m: str(lookup(m.group(1))), value)
