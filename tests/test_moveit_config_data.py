"""Tests for description parsing and the config file writers."""

from pathlib import Path

import pytest
import yaml

from moveit_config_data import (
    GroupMetaData,
    MoveItConfigData,
    PLANNER_CONFIGS,
    parse_srdf,
    parse_urdf,
)
from srdf_writer import SRDFWriter


def test_parse_urdf_joint_tree(urdf_file: Path) -> None:
    model = parse_urdf(str(urdf_file))

    assert model.name == "arm7"
    assert model.root_link == "base_link"
    assert model.joints["joint1"]["limits"]["velocity"] == 2.0
    assert model.joints["tool_joint"]["type"] == "fixed"
    assert model.chain_joints("base_link", "tool") == ["joint1", "joint2", "tool_joint"]
    assert model.chain_joints("link2", "link1") == []


def test_parse_srdf(srdf_file: Path) -> None:
    srdf = parse_srdf(str(srdf_file))

    assert srdf.robot_name == "arm7"
    assert [g.name for g in srdf.groups] == ["arm", "gripper", "everything"]
    assert srdf.groups[0].chains == [("base_link", "link2")]
    assert srdf.groups[2].subgroups == ["arm", "gripper"]
    assert srdf.group_states[0].joint_values == {"joint1": [0.0], "joint2": [0.1]}
    assert srdf.end_effectors[0].component_group == "gripper"
    assert srdf.end_effectors[0].parent_group == "arm"
    assert srdf.virtual_joints[0].type == "fixed"
    assert srdf.passive_joints[0].name == "joint2"
    assert srdf.disabled_collisions[0].reason == "Adjacent"


def test_parse_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        parse_srdf(str(tmp_path / "missing.srdf"))


def test_parse_invalid_xml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.urdf"
    path.write_text("<robot name='x'>")
    with pytest.raises(ValueError):
        parse_urdf(str(path))


def test_from_files(urdf_file: Path, srdf_file: Path) -> None:
    data = MoveItConfigData.from_files(str(urdf_file), str(srdf_file))

    assert data.srdf.robot_name == "arm7"
    assert data.urdf_model.name == "arm7"
    assert Path(data.urdf_path).is_absolute()


def test_group_joints_resolve_chains_links_and_subgroups(urdf_file: Path, srdf_file: Path) -> None:
    data = MoveItConfigData.from_files(str(urdf_file), str(srdf_file))

    assert data.group_joint_names("arm") == ["joint1", "joint2"]
    assert data.group_joint_names("gripper") == ["tool_joint"]
    assert data.group_joint_names("everything") == ["joint1", "joint2", "tool_joint"]


def test_ompl_planning_yaml(config_data, tmp_path: Path) -> None:
    path = tmp_path / "ompl_planning.yaml"

    assert config_data.output_ompl_planning_yaml(str(path))

    doc = yaml.safe_load(path.read_text())
    assert set(doc["planner_configs"]) == set(PLANNER_CONFIGS)
    assert doc["planner_configs"]["RRTConnectkConfigDefault"]["type"] == "geometric::RRTConnect"
    assert doc["arm"]["planner_configs"] == list(PLANNER_CONFIGS)
    assert doc["arm"]["projection_evaluator"] == "joints(joint1,joint2)"


def test_kinematics_yaml_only_lists_groups_with_solver(config_data, tmp_path: Path) -> None:
    config_data.group_meta_data["gripper"] = GroupMetaData(kinematics_solver="None")
    path = tmp_path / "kinematics.yaml"

    assert config_data.output_kinematics_yaml(str(path))

    doc = yaml.safe_load(path.read_text())
    assert list(doc) == ["arm"]
    assert doc["arm"]["kinematics_solver"] == "kdl_kinematics_plugin/KDLKinematicsPlugin"
    assert doc["arm"]["kinematics_solver_attempts"] == 3


def test_joint_limits_yaml(config_data, tmp_path: Path) -> None:
    path = tmp_path / "joint_limits.yaml"

    assert config_data.output_joint_limits_yaml(str(path))

    text = path.read_text()
    assert text.startswith("# joint_limits.yaml")
    limits = yaml.safe_load(text)["joint_limits"]
    assert list(limits) == ["joint1", "joint2"]
    assert limits["joint2"] == {
        "has_velocity_limits": True,
        "max_velocity": 0.25,
        "has_acceleration_limits": False,
        "max_acceleration": 0,
    }


def test_writer_reports_unwritable_path(config_data, tmp_path: Path) -> None:
    assert not config_data.output_kinematics_yaml(str(tmp_path / "missing" / "kinematics.yaml"))


def test_setup_assistant_file_round_trip(config_data, tmp_path: Path) -> None:
    config_data.urdf_pkg_name = "arm7_description"
    config_data.urdf_pkg_relative_path = "urdf/arm7.urdf"
    config_data.srdf_pkg_relative_path = "config/arm7.srdf"
    path = tmp_path / ".setup_assistant"

    assert config_data.output_setup_assistant_file(str(path))

    doc = yaml.safe_load(path.read_text())["moveit_setup_assistant_config"]
    assert doc["URDF"] == {"package": "arm7_description", "relative_path": "urdf/arm7.urdf"}
    assert isinstance(doc["CONFIG"]["generated_timestamp"], int)

    reloaded = MoveItConfigData(setup_assistant_path=str(tmp_path))
    assert reloaded.load_setup_assistant_file(str(path))
    assert reloaded.urdf_pkg_name == "arm7_description"
    assert reloaded.urdf_pkg_relative_path == "urdf/arm7.urdf"
    assert reloaded.srdf_pkg_relative_path == "config/arm7.srdf"


def test_load_setup_assistant_file_rejects_other_yaml(tmp_path: Path) -> None:
    path = tmp_path / ".setup_assistant"
    path.write_text("something_else: 1\n")
    assert not MoveItConfigData(setup_assistant_path=str(tmp_path)).load_setup_assistant_file(str(path))


def test_srdf_writer_output_parses_back(srdf_file: Path, tmp_path: Path) -> None:
    original = parse_srdf(str(srdf_file))
    path = tmp_path / "written.srdf"

    assert SRDFWriter(original).write_srdf(str(path))

    assert path.read_text().startswith('<?xml version="1.0" ?>')
    assert parse_srdf(str(path)) == original


def test_srdf_writer_reports_unwritable_path(complete_srdf, tmp_path: Path) -> None:
    assert not SRDFWriter(complete_srdf).write_srdf(str(tmp_path / "missing" / "robot.srdf"))


def test_load_kinematics_yaml(config_data, tmp_path: Path) -> None:
    path = tmp_path / "kinematics.yaml"
    path.write_text(
        "arm:\n"
        "  kinematics_solver: kdl_kinematics_plugin/KDLKinematicsPlugin\n"
        "  kinematics_solver_timeout: 0.1\n"
        "gripper:\n"
        "  kinematics_solver_attempts: 2\n"
    )
    data = MoveItConfigData(setup_assistant_path=str(tmp_path))

    assert data.load_kinematics_yaml(str(path))

    assert list(data.group_meta_data) == ["arm"]
    assert data.group_meta_data["arm"] == GroupMetaData(
        kinematics_solver="kdl_kinematics_plugin/KDLKinematicsPlugin",
        kinematics_solver_timeout=0.1,
    )


def test_load_kinematics_yaml_rejects_other_yaml(tmp_path: Path) -> None:
    path = tmp_path / "kinematics.yaml"
    path.write_text("- not\n- a mapping\n")
    assert not MoveItConfigData(setup_assistant_path=str(tmp_path)).load_kinematics_yaml(str(path))


def test_set_kinematics_solver_keeps_other_settings(config_data) -> None:
    config_data.group_meta_data["arm"].kinematics_solver_attempts = 7
    config_data.set_kinematics_solver("arm", "trac_ik_kinematics_plugin/TRAC_IKKinematicsPlugin")
    config_data.set_kinematics_solver("gripper", "kdl_kinematics_plugin/KDLKinematicsPlugin")

    assert config_data.group_meta_data["arm"].kinematics_solver_attempts == 7
    assert config_data.group_meta_data["arm"].kinematics_solver == "trac_ik_kinematics_plugin/TRAC_IKKinematicsPlugin"
    assert config_data.group_meta_data["gripper"].kinematics_solver_attempts == 3
