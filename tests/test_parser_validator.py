import pytest

from repocfg.core import (
    ATLANTIS_YAML_FILENAME,
    ConfigError,
    DecodeError,
    ErrorKind,
    IdentityConflictError,
    ParserValidator,
    ValidationError,
    WorkflowReferenceError,
    is_not_found,
    read_config,
)
from repocfg.core import valid


# --- Archivo ausente / ilegible ---

def test_missing_file_is_not_found(tmp_path):
    with pytest.raises(ConfigError) as exc:
        read_config(tmp_path)
    assert is_not_found(exc.value)
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert isinstance(exc.value.cause, FileNotFoundError)


def test_unreadable_file_is_read_failure(tmp_path):
    # Un directorio con el nombre del archivo no se puede leer como archivo
    (tmp_path / ATLANTIS_YAML_FILENAME).mkdir()
    with pytest.raises(ConfigError) as exc:
        read_config(tmp_path)
    assert exc.value.kind is ErrorKind.READ_FAILURE
    assert not is_not_found(exc.value)
    assert str(exc.value).startswith(f"unable to read {ATLANTIS_YAML_FILENAME} file")


@pytest.mark.parametrize("kind", [k for k in ErrorKind if k is not ErrorKind.NOT_FOUND])
def test_not_found_predicate_false_for_other_kinds(kind):
    assert not is_not_found(ConfigError(kind, "boom"))


def test_not_found_predicate_false_for_foreign_errors():
    assert not is_not_found(FileNotFoundError("atlantis.yaml"))
    assert not is_not_found(ValueError("x"))


# --- Caso feliz ---

def test_round_trip_preserves_order_and_fields(write_config):
    repo = write_config("""
        version: 2
        projects:
        - name: app-staging
          dir: app
          workspace: staging
          workflow: custom
          terraform_version: v0.11.10
          apply_requirements: [approved]
        - name: app-prod
          dir: app
          workspace: prod
          autoplan:
            when_modified: ["*.tf", "../modules/**"]
            enabled: false
        - name: network
          dir: ./network/
        workflows:
          custom:
            plan:
              steps:
              - init
              - plan:
                  extra_args: ["-var-file", "staging.tfvars"]
    """)
    spec = read_config(repo)

    assert spec.version == 2
    assert [p.name for p in spec.projects] == ["app-staging", "app-prod", "network"]

    staging, prod, network = spec.projects
    assert staging.dir == "app"
    assert staging.workspace == "staging"
    assert staging.workflow == "custom"
    assert staging.terraform_version == "v0.11.10"
    assert staging.apply_requirements == ("approved",)
    assert staging.autoplan == valid.Autoplan()

    assert prod.autoplan.when_modified == ("*.tf", "../modules/**")
    assert prod.autoplan.enabled is False
    assert prod.workflow is None

    assert network.dir == "network"
    assert network.workspace == "default"

    custom = spec.workflows["custom"]
    assert custom.plan.steps == (
        valid.Step("init"),
        valid.Step("plan", extra_args=("-var-file", "staging.tfvars")),
    )
    # apply no declarado -> pasos por defecto
    assert custom.apply.steps == (valid.Step("apply"),)


def test_empty_file_yields_empty_spec(write_config):
    repo = write_config("")
    assert read_config(repo) == valid.Spec()


def test_version_is_optional(write_config):
    repo = write_config("""
        projects:
        - dir: .
    """)
    spec = read_config(repo)
    assert spec.version is None
    assert spec.projects == (valid.Project(dir="."),)


def test_parser_validator_instance_matches_shortcut(write_config):
    repo = write_config("""
        version: 2
        projects:
        - dir: infra
    """)
    assert ParserValidator().read_config(str(repo)) == read_config(repo)


# --- Decodificación estricta ---

def test_unknown_top_level_field_is_decode_failure(write_config):
    repo = write_config("""
        version: 2
        projcts:
        - dir: .
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert isinstance(exc.value.cause, DecodeError)
    assert str(exc.value).startswith(f"parsing {ATLANTIS_YAML_FILENAME}: ")
    assert "projcts" in str(exc.value)


def test_unknown_nested_field_is_decode_failure(write_config):
    repo = write_config("""
        projects:
        - dir: .
          autoplan:
            when_modifed: ["*.tf"]
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "when_modifed" in str(exc.value)


def test_unknown_stage_field_is_decode_failure(write_config):
    repo = write_config("""
        workflows:
          custom:
            plan:
              stpes: [init]
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "stpes" in str(exc.value)


def test_malformed_yaml_is_decode_failure(write_config):
    repo = write_config("""
        projects:
        - dir: .
         workspace: bad-indent
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "line" in str(exc.value)


def test_wrong_scalar_type_is_decode_failure(write_config):
    repo = write_config("""
        version: "2"
        projects:
        - dir: .
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "version" in str(exc.value)


def test_non_mapping_root_is_decode_failure(write_config):
    repo = write_config("""
        - dir: .
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE


def test_duplicate_top_level_key_is_decode_failure(write_config):
    repo = write_config("""
        projects:
        - dir: a
        projects:
        - dir: b
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    message = str(exc.value)
    assert "found duplicate key 'projects'" in message
    assert "line 4" in message


def test_duplicate_workflow_name_is_decode_failure(write_config):
    repo = write_config("""
        projects:
        - dir: .
          workflow: custom
        workflows:
          custom:
            plan:
              steps: [init]
          custom:
            apply:
              steps: [apply]
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "found duplicate key 'custom'" in str(exc.value)


def test_numeric_scalars_keep_their_text_in_string_fields(write_config):
    repo = write_config("""
        version: 2
        projects:
        - dir: 2019
          workspace: 2019
          terraform_version: 0.12
        - dir: legacy
          name: 42
          terraform_version: 0.10
    """)
    spec = read_config(repo)
    current, legacy = spec.projects
    assert current.dir == "2019"
    assert current.workspace == "2019"
    assert current.terraform_version == "0.12"
    assert legacy.name == "42"
    assert legacy.terraform_version == "0.10"
    assert spec.version == 2


def test_boolean_scalar_in_string_field_is_decode_failure(write_config):
    repo = write_config("""
        projects:
        - dir: .
          workspace: true
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE
    assert "workspace" in str(exc.value)


def test_numeric_items_in_lists_stay_strict(write_config):
    repo = write_config("""
        projects:
        - dir: .
          apply_requirements: [1]
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.DECODE_FAILURE


# --- Validación estructural ---

@pytest.mark.parametrize(
    "content, expected",
    [
        ("version: 3\n", "version: only version 2 is supported"),
        ("projects:\n- workspace: w\n", "projects[0].dir: cannot be blank"),
        ("projects:\n- dir: .\n- dir: ../other\n", "projects[1].dir: cannot contain '..'"),
        (
            "projects:\n- dir: .\n  apply_requirements: [mergeable]\n",
            'projects[0].apply_requirements: "mergeable" not supported, only approved is supported',
        ),
        (
            "projects:\n- dir: .\n  terraform_version: latest\n",
            'projects[0].terraform_version: version "latest" could not be parsed',
        ),
        ("projects:\n- dir: .\n  name: ''\n", "projects[0].name: if set cannot be empty"),
        (
            "workflows:\n  custom:\n    apply:\n      steps: [init, destroy]\n",
            'workflows.custom.apply.steps[1]: "destroy" is not a valid step type',
        ),
    ],
)
def test_structural_failures(write_config, content, expected):
    repo = write_config(content)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.VALIDATION_FAILURE
    assert isinstance(exc.value.cause, ValidationError)
    assert str(exc.value) == f"parsing {ATLANTIS_YAML_FILENAME}: {expected}"


# --- Workflows referenciados ---

def test_undefined_workflow_fails(write_config):
    repo = write_config("""
        projects:
        - dir: .
          workflow: custom
        workflows: {}
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.WORKFLOW_REFERENCE
    assert isinstance(exc.value.cause, WorkflowReferenceError)
    assert 'workflow "custom" is not defined' in str(exc.value)


def test_undefined_workflow_without_workflows_section(write_config):
    repo = write_config("""
        version: 2
        projects:
        - dir: .
          workflow: custom
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert str(exc.value) == f'parsing {ATLANTIS_YAML_FILENAME}: workflow "custom" is not defined'


def test_first_undefined_workflow_wins(write_config):
    repo = write_config("""
        projects:
        - dir: a
          workflow: first
        - dir: b
          workflow: second
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert '"first"' in str(exc.value)
    assert '"second"' not in str(exc.value)


def test_defined_workflow_without_body(write_config):
    repo = write_config("""
        projects:
        - dir: .
          workflow: custom
        workflows:
          custom:
    """)
    spec = read_config(repo)
    assert spec.get_plan_stage("custom") == valid.Stage((valid.Step("init"), valid.Step("plan")))


def test_workflow_check_runs_before_identity_checks(write_config):
    repo = write_config("""
        projects:
        - dir: .
          name: dup
        - dir: .
          name: dup
          workflow: missing
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.WORKFLOW_REFERENCE


# --- Identidad de proyectos ---

def test_duplicate_names_fail(write_config):
    repo = write_config("""
        projects:
        - dir: staging
          name: staging
        - dir: other
          workspace: staging
          name: staging
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT
    assert isinstance(exc.value.cause, IdentityConflictError)
    assert 'found two or more projects with name "staging"' in str(exc.value)


def test_unnamed_dir_workspace_collision_fails(write_config):
    repo = write_config("""
        projects:
        - dir: infra
        - dir: infra
          workspace: default
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT
    message = str(exc.value)
    assert 'dir: "infra"' in message
    assert 'workspace: "default"' in message


def test_collision_detected_after_dir_cleaning(write_config):
    repo = write_config("""
        projects:
        - dir: infra
        - dir: ./infra/
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT


def test_double_leading_slash_collides_with_single(write_config):
    repo = write_config("""
        projects:
        - dir: /infra
        - dir: //infra
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT
    assert 'dir: "/infra"' in str(exc.value)


def test_single_unnamed_project_per_dir_workspace_succeeds(write_config):
    repo = write_config("""
        projects:
        - dir: infra
        - dir: infra
          workspace: staging
        - dir: network
    """)
    spec = read_config(repo)
    assert len(spec.projects) == 3


def test_first_unnamed_project_is_exempt(write_config):
    # Asimetría heredada: solo se exige nombre a las llegadas posteriores
    repo = write_config("""
        projects:
        - dir: app
        - dir: app
          name: app-a
        - dir: app
          name: app-b
    """)
    spec = read_config(repo)
    assert [p.name for p in spec.projects] == [None, "app-a", "app-b"]
    assert len(spec.find_projects_by_dir_workspace("app", "default")) == 3


def test_later_unnamed_arrival_fails_even_if_first_is_named(write_config):
    repo = write_config("""
        projects:
        - dir: app
          name: app-a
        - dir: app
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT


def test_third_unnamed_arrival_fails(write_config):
    repo = write_config("""
        projects:
        - dir: app
        - dir: app
          name: app-a
        - dir: app
    """)
    with pytest.raises(ConfigError) as exc:
        read_config(repo)
    assert exc.value.kind is ErrorKind.IDENTITY_CONFLICT


# --- Etapas sin envolver ---

def test_parse_and_validate_raises_unwrapped_errors():
    pv = ParserValidator()
    with pytest.raises(WorkflowReferenceError):
        pv.parse_and_validate(b"projects:\n- dir: .\n  workflow: custom\n")
    with pytest.raises(DecodeError):
        pv.parse_and_validate(b"nope: 1\n")
