import sys
from pathlib import Path

import pytest

# Ensure the repo root is on sys.path so tests can import the top-level modules.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from configuration_files import RecordingPrompter  # noqa: E402
from moveit_config_data import (  # noqa: E402
    DisabledCollision,
    EndEffector,
    Group,
    GroupMetaData,
    MoveItConfigData,
    SRDFModel,
    VirtualJoint,
    parse_urdf,
)

SAMPLE_URDF = """<?xml version="1.0"?>
<robot name="arm7">
  <link name="base_link"/>
  <link name="link1"/>
  <link name="link2"/>
  <link name="tool"/>
  <joint name="joint1" type="revolute">
    <parent link="base_link"/>
    <child link="link1"/>
    <limit lower="-3.14" upper="3.14" velocity="2.0" effort="10"/>
  </joint>
  <joint name="joint2" type="prismatic">
    <parent link="link1"/>
    <child link="link2"/>
    <limit lower="0" upper="0.5" velocity="0.25" effort="10"/>
  </joint>
  <joint name="tool_joint" type="fixed">
    <parent link="link2"/>
    <child link="tool"/>
  </joint>
</robot>
"""

SAMPLE_SRDF = """<?xml version="1.0" ?>
<robot name="arm7">
    <group name="arm">
        <chain base_link="base_link" tip_link="link2" />
    </group>
    <group name="gripper">
        <link name="tool" />
    </group>
    <group name="everything">
        <group name="arm" />
        <group name="gripper" />
    </group>
    <group_state name="home" group="arm">
        <joint name="joint1" value="0" />
        <joint name="joint2" value="0.1" />
    </group_state>
    <end_effector name="hand" parent_link="link2" group="gripper" parent_group="arm" />
    <virtual_joint name="world_joint" type="fixed" parent_frame="world" child_link="base_link" />
    <passive_joint name="joint2" />
    <disable_collisions link1="base_link" link2="link1" reason="Adjacent" />
</robot>
"""


@pytest.fixture
def urdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "arm7.urdf"
    path.write_text(SAMPLE_URDF)
    return path


@pytest.fixture
def srdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "arm7.srdf"
    path.write_text(SAMPLE_SRDF)
    return path


@pytest.fixture
def complete_srdf() -> SRDFModel:
    return SRDFModel(
        robot_name="arm7",
        groups=[Group(name="arm", chains=[("base_link", "link2")])],
        virtual_joints=[VirtualJoint("world_joint", "fixed", "world", "base_link")],
        end_effectors=[EndEffector("hand", "link2", "arm")],
        disabled_collisions=[DisabledCollision("base_link", "link1", "Adjacent")],
    )


@pytest.fixture
def config_data(urdf_file: Path, complete_srdf: SRDFModel) -> MoveItConfigData:
    data = MoveItConfigData(
        srdf=complete_srdf,
        urdf_model=parse_urdf(str(urdf_file)),
        urdf_path=str(urdf_file),
        setup_assistant_path=str(ROOT),
    )
    data.group_meta_data["arm"] = GroupMetaData(kinematics_solver="kdl_kinematics_plugin/KDLKinematicsPlugin")
    return data


@pytest.fixture
def prompter() -> RecordingPrompter:
    return RecordingPrompter()
