#!/usr/bin/env python3
"""
MoveIt Config Data - robot description state shared by the setup assistant screens

Holds the parsed URDF and SRDF of the robot being configured and writes the
YAML configuration files and the hidden .setup_assistant settings file of a
MoveIt configuration package.
"""

import logging
import os
import sys
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Marker file identifying a directory as a previously generated package
SETUP_ASSISTANT_FILE = ".setup_assistant"
KINEMATICS_FILE = os.path.join("config", "kinematics.yaml")
TEMPLATE_PACKAGE_DIR = os.path.join("templates", "moveit_config_pkg_template")
DATA_FILES_DIR = os.path.join("share", "moveit_config_files")

DEFAULT_KIN_SOLVER_SEARCH_RESOLUTION = 0.005
DEFAULT_KIN_SOLVER_TIMEOUT = 0.005
DEFAULT_KIN_SOLVER_ATTEMPTS = 3
LONGEST_VALID_SEGMENT_FRACTION = 0.005

# Planner configurations offered to every planning group in ompl_planning.yaml
PLANNER_CONFIGS: Dict[str, Dict[str, Any]] = {
    "SBLkConfigDefault": {"type": "geometric::SBL", "range": 0.0},
    "ESTkConfigDefault": {"type": "geometric::EST", "range": 0.0, "goal_bias": 0.05},
    "LBKPIECEkConfigDefault": {
        "type": "geometric::LBKPIECE",
        "range": 0.0,
        "border_fraction": 0.9,
        "min_valid_path_fraction": 0.5,
    },
    "BKPIECEkConfigDefault": {
        "type": "geometric::BKPIECE",
        "range": 0.0,
        "border_fraction": 0.9,
        "failed_expansion_score_factor": 0.5,
        "min_valid_path_fraction": 0.5,
    },
    "KPIECEkConfigDefault": {
        "type": "geometric::KPIECE",
        "range": 0.0,
        "goal_bias": 0.05,
        "border_fraction": 0.9,
        "failed_expansion_score_factor": 0.5,
        "min_valid_path_fraction": 0.5,
    },
    "RRTkConfigDefault": {"type": "geometric::RRT", "range": 0.0, "goal_bias": 0.05},
    "RRTConnectkConfigDefault": {"type": "geometric::RRTConnect", "range": 0.0},
    "RRTstarkConfigDefault": {
        "type": "geometric::RRTstar",
        "range": 0.0,
        "goal_bias": 0.05,
        "delay_collision_checking": 1,
    },
    "TRRTkConfigDefault": {
        "type": "geometric::TRRT",
        "range": 0.0,
        "goal_bias": 0.05,
        "max_states_failed": 10,
        "temp_change_factor": 2.0,
        "min_temperature": 10e-10,
        "init_temperature": 10e-6,
        "frountier_threshold": 0.0,
        "frountierNodeRatio": 0.1,
        "k_constant": 0.0,
    },
    "PRMkConfigDefault": {"type": "geometric::PRM", "max_nearest_neighbors": 10},
    "PRMstarkConfigDefault": {"type": "geometric::PRMstar"},
}


@dataclass
class Group:
    """Planning group: a named set of joints, links, chains and subgroups"""
    name: str
    joints: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    chains: List[Tuple[str, str]] = field(default_factory=list)
    subgroups: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.joints or self.links or self.chains or self.subgroups)


@dataclass
class GroupState:
    name: str
    group: str
    joint_values: Dict[str, List[float]] = field(default_factory=dict)


@dataclass
class VirtualJoint:
    name: str
    type: str
    parent_frame: str
    child_link: str


@dataclass
class EndEffector:
    name: str
    parent_link: str
    component_group: str
    parent_group: str = ""


@dataclass
class PassiveJoint:
    name: str


@dataclass
class DisabledCollision:
    link1: str
    link2: str
    reason: str = ""


@dataclass
class SRDFModel:
    """Semantic robot description being edited by the setup assistant"""
    robot_name: str
    groups: List[Group] = field(default_factory=list)
    group_states: List[GroupState] = field(default_factory=list)
    virtual_joints: List[VirtualJoint] = field(default_factory=list)
    end_effectors: List[EndEffector] = field(default_factory=list)
    passive_joints: List[PassiveJoint] = field(default_factory=list)
    disabled_collisions: List[DisabledCollision] = field(default_factory=list)

    def find_group(self, name: str) -> Optional[Group]:
        for group in self.groups:
            if group.name == name:
                return group
        return None


@dataclass
class URDFModel:
    """Joint tree of the robot read from its URDF"""
    name: str
    joints: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    root_link: Optional[str] = None

    def parent_joint(self, link_name: str) -> Optional[str]:
        for joint_name, joint in self.joints.items():
            if joint.get("child") == link_name:
                return joint_name
        return None

    def chain_joints(self, base_link: str, tip_link: str) -> List[str]:
        """Joints from base_link down to tip_link, empty if tip is not below base"""
        chain = []
        link = tip_link
        while link != base_link:
            joint_name = self.parent_joint(link)
            if joint_name is None or len(chain) > len(self.joints):
                return []
            chain.append(joint_name)
            link = self.joints[joint_name].get("parent")
        chain.reverse()
        return chain


@dataclass
class GroupMetaData:
    """Kinematic solver settings of a planning group"""
    kinematics_solver: str = ""
    kinematics_solver_search_resolution: float = DEFAULT_KIN_SOLVER_SEARCH_RESOLUTION
    kinematics_solver_timeout: float = DEFAULT_KIN_SOLVER_TIMEOUT
    kinematics_solver_attempts: int = DEFAULT_KIN_SOLVER_ATTEMPTS


def _float_attr(tag: Optional[ET.Element], name: str) -> Optional[float]:
    if tag is None or name not in tag.attrib:
        return None
    return float(tag.attrib[name])


def _parse_xml_root(path: str, kind: str) -> ET.Element:
    xml_path = Path(path)
    if not xml_path.is_file():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    try:
        root = ET.parse(xml_path).getroot()
    except ET.ParseError as e:
        raise ValueError(f"Unable to parse {kind} file {path}: {e}")
    if root.tag != "robot":
        raise ValueError(f"{kind} file {path} has no <robot> root element")
    return root


def parse_urdf(urdf_path: str) -> URDFModel:
    """Parse the robot name and joint tree (types, parents, children, limits) of a URDF"""
    root = _parse_xml_root(urdf_path, "URDF")

    joints = {}
    child_links = set()
    for joint in root.findall("joint"):
        parent_tag = joint.find("parent")
        child_tag = joint.find("child")
        limit_tag = joint.find("limit")
        parent = parent_tag.attrib.get("link") if parent_tag is not None else None
        child = child_tag.attrib.get("link") if child_tag is not None else None
        child_links.add(child)
        joints[joint.attrib.get("name")] = {
            "type": joint.attrib.get("type"),
            "parent": parent,
            "child": child,
            "limits": {
                "lower": _float_attr(limit_tag, "lower"),
                "upper": _float_attr(limit_tag, "upper"),
                "velocity": _float_attr(limit_tag, "velocity"),
                "effort": _float_attr(limit_tag, "effort"),
            },
        }

    link_names = [link.attrib.get("name") for link in root.findall("link")]
    root_candidates = [name for name in link_names if name not in child_links]
    root_link = root_candidates[0] if root_candidates else None

    logger.debug(f"Parsed URDF {urdf_path}: {len(joints)} joints, root link {root_link}")
    return URDFModel(name=root.attrib.get("name", ""), joints=joints, root_link=root_link)


def parse_srdf(srdf_path: str) -> SRDFModel:
    """Parse groups, group states, end effectors, virtual/passive joints and disabled collisions of an SRDF"""
    root = _parse_xml_root(srdf_path, "SRDF")

    groups = []
    for g in root.findall("group"):
        groups.append(Group(
            name=g.attrib.get("name", ""),
            joints=[j.attrib.get("name") for j in g.findall("joint")],
            links=[l.attrib.get("name") for l in g.findall("link")],
            chains=[(c.attrib.get("base_link"), c.attrib.get("tip_link")) for c in g.findall("chain")],
            subgroups=[s.attrib.get("name") for s in g.findall("group")],
        ))

    group_states = []
    for gs in root.findall("group_state"):
        values = {}
        for j in gs.findall("joint"):
            values[j.attrib.get("name")] = [float(v) for v in j.attrib.get("value", "").split()]
        group_states.append(GroupState(name=gs.attrib.get("name", ""), group=gs.attrib.get("group", ""), joint_values=values))

    virtual_joints = [
        VirtualJoint(
            name=vj.attrib.get("name", ""),
            type=vj.attrib.get("type", ""),
            parent_frame=vj.attrib.get("parent_frame", ""),
            child_link=vj.attrib.get("child_link", ""),
        )
        for vj in root.findall("virtual_joint")
    ]
    end_effectors = [
        EndEffector(
            name=ee.attrib.get("name", ""),
            parent_link=ee.attrib.get("parent_link", ""),
            component_group=ee.attrib.get("group", ""),
            parent_group=ee.attrib.get("parent_group", ""),
        )
        for ee in root.findall("end_effector")
    ]
    passive_joints = [PassiveJoint(name=pj.attrib.get("name", "")) for pj in root.findall("passive_joint")]
    disabled_collisions = [
        DisabledCollision(
            link1=dc.attrib.get("link1", ""),
            link2=dc.attrib.get("link2", ""),
            reason=dc.attrib.get("reason", ""),
        )
        for dc in root.findall("disable_collisions")
    ]

    return SRDFModel(
        robot_name=root.attrib.get("name", ""),
        groups=groups,
        group_states=group_states,
        virtual_joints=virtual_joints,
        end_effectors=end_effectors,
        passive_joints=passive_joints,
        disabled_collisions=disabled_collisions,
    )


def default_setup_assistant_path() -> str:
    """Directory holding templates/, either beside this module or under the installed data files"""
    module_dir = Path(__file__).resolve().parent
    if (module_dir / TEMPLATE_PACKAGE_DIR).is_dir():
        return str(module_dir)
    installed = Path(sys.prefix) / DATA_FILES_DIR
    if (installed / TEMPLATE_PACKAGE_DIR).is_dir():
        return str(installed)
    return str(module_dir)


class MoveItConfigData:
    """Description state of the robot being configured, plus the writers for its config files"""

    def __init__(self, srdf: Optional[SRDFModel] = None,
                 urdf_model: Optional[URDFModel] = None,
                 urdf_path: str = "",
                 urdf_pkg_name: str = "",
                 urdf_pkg_relative_path: str = "",
                 config_pkg_path: str = "",
                 setup_assistant_path: Optional[str] = None):
        self.urdf_model = urdf_model
        self.srdf = srdf or SRDFModel(robot_name=urdf_model.name if urdf_model else "")
        self.urdf_path = urdf_path
        self.urdf_pkg_name = urdf_pkg_name
        self.urdf_pkg_relative_path = urdf_pkg_relative_path
        self.config_pkg_path = config_pkg_path
        self.setup_assistant_path = setup_assistant_path or default_setup_assistant_path()

        # Filled in while the list of files to generate is built
        self.template_package_path = ""
        self.srdf_pkg_relative_path = ""

        self.group_meta_data: Dict[str, GroupMetaData] = {}

    @classmethod
    def from_files(cls, urdf_path: str, srdf_path: Optional[str] = None, **kwargs) -> "MoveItConfigData":
        """Load description state from a URDF and an optional SRDF"""
        urdf_model = parse_urdf(urdf_path)
        config_data = cls(urdf_model=urdf_model, urdf_path=str(Path(urdf_path).resolve()), **kwargs)
        if srdf_path:
            config_data.load_srdf(srdf_path)
        logger.info(f"Loaded robot '{config_data.srdf.robot_name}' from {urdf_path}")
        return config_data

    def load_srdf(self, srdf_path: str) -> None:
        self.srdf = parse_srdf(srdf_path)
        if not self.srdf.robot_name and self.urdf_model:
            self.srdf.robot_name = self.urdf_model.name

    @staticmethod
    def append_paths(path1: str, path2: str) -> str:
        return os.path.normpath(os.path.join(path1, path2))

    # ------------------------------------------------------------------
    # Group helpers
    # ------------------------------------------------------------------

    def group_joint_names(self, group_name: str, _seen: Optional[set] = None) -> List[str]:
        """All joints of a planning group, resolving links, chains and subgroups against the URDF"""
        seen = _seen if _seen is not None else set()
        group = self.srdf.find_group(group_name)
        if group is None or group_name in seen:
            return []
        seen.add(group_name)

        names = list(group.joints)
        if self.urdf_model is not None:
            for base_link, tip_link in group.chains:
                names.extend(self.urdf_model.chain_joints(base_link, tip_link))
            for link in group.links:
                joint_name = self.urdf_model.parent_joint(link)
                if joint_name:
                    names.append(joint_name)
        for subgroup in group.subgroups:
            names.extend(self.group_joint_names(subgroup, seen))

        return list(dict.fromkeys(names))

    def _active_joint(self, joint_name: str) -> bool:
        if self.urdf_model is None:
            return True
        joint = self.urdf_model.joints.get(joint_name)
        return joint is not None and joint.get("type") != "fixed"

    # ------------------------------------------------------------------
    # Config file writers
    # ------------------------------------------------------------------

    def _write_yaml(self, file_path: str, data: Dict[str, Any], header: str = "") -> bool:
        try:
            with open(file_path, "w") as f:
                if header:
                    f.write(header)
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error(f"Unable to open file for writing {file_path}: {e}")
            return False
        return True

    def output_ompl_planning_yaml(self, file_path: str) -> bool:
        """Write ompl_planning.yaml: shared planner configs plus per-group settings"""
        data: Dict[str, Any] = {"planner_configs": {name: dict(cfg) for name, cfg in PLANNER_CONFIGS.items()}}

        for group in self.srdf.groups:
            group_data: Dict[str, Any] = {"planner_configs": list(PLANNER_CONFIGS)}
            joints = [name for name in self.group_joint_names(group.name) if self._active_joint(name)]
            if len(joints) >= 2:
                group_data["projection_evaluator"] = f"joints({joints[0]},{joints[1]})"
            group_data["longest_valid_segment_fraction"] = LONGEST_VALID_SEGMENT_FRACTION
            data[group.name] = group_data

        return self._write_yaml(file_path, data)

    def output_kinematics_yaml(self, file_path: str) -> bool:
        """Write kinematics.yaml for every group that has a solver plugin selected"""
        data: Dict[str, Any] = {}
        for group_name, meta in self.group_meta_data.items():
            if not meta.kinematics_solver or meta.kinematics_solver == "None":
                continue
            data[group_name] = {
                "kinematics_solver": meta.kinematics_solver,
                "kinematics_solver_search_resolution": meta.kinematics_solver_search_resolution,
                "kinematics_solver_timeout": meta.kinematics_solver_timeout,
                "kinematics_solver_attempts": meta.kinematics_solver_attempts,
            }
        return self._write_yaml(file_path, data)

    def load_kinematics_yaml(self, file_path: str) -> bool:
        """Read the per group solver settings of an existing kinematics.yaml into group_meta_data"""
        try:
            with open(file_path, "r") as f:
                doc = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Unable to load kinematics file {file_path}: {e}")
            return False

        if doc is None:
            return True
        if not isinstance(doc, dict):
            logger.error(f"{file_path} is not a kinematics settings file")
            return False

        for group_name, settings in doc.items():
            if not isinstance(settings, dict) or not settings.get("kinematics_solver"):
                continue
            self.group_meta_data[group_name] = GroupMetaData(
                kinematics_solver=settings["kinematics_solver"],
                kinematics_solver_search_resolution=settings.get(
                    "kinematics_solver_search_resolution", DEFAULT_KIN_SOLVER_SEARCH_RESOLUTION),
                kinematics_solver_timeout=settings.get("kinematics_solver_timeout", DEFAULT_KIN_SOLVER_TIMEOUT),
                kinematics_solver_attempts=settings.get("kinematics_solver_attempts", DEFAULT_KIN_SOLVER_ATTEMPTS),
            )
        logger.debug(f"Loaded kinematics settings for {len(self.group_meta_data)} groups from {file_path}")
        return True

    def set_kinematics_solver(self, group_name: str, plugin: str) -> None:
        meta = self.group_meta_data.setdefault(group_name, GroupMetaData())
        meta.kinematics_solver = plugin

    def output_joint_limits_yaml(self, file_path: str) -> bool:
        """Write joint_limits.yaml for the active joints used by the planning groups"""
        joint_names = set()
        for group in self.srdf.groups:
            joint_names.update(name for name in self.group_joint_names(group.name) if self._active_joint(name))

        joint_limits = {}
        for joint_name in sorted(joint_names):
            limits = {}
            if self.urdf_model is not None:
                limits = self.urdf_model.joints.get(joint_name, {}).get("limits", {})
            velocity = limits.get("velocity")
            joint_limits[joint_name] = {
                "has_velocity_limits": bool(velocity),
                "max_velocity": abs(velocity) if velocity else 0,
                "has_acceleration_limits": False,
                "max_acceleration": 0,
            }

        header = (
            "# joint_limits.yaml allows the dynamics properties specified in the URDF to be overwritten or augmented as needed\n"
            "# Specific joint properties can be changed with the keys [max_position, min_position, max_velocity, max_acceleration]\n"
            "# Joint limits can be turned off with [has_velocity_limits, has_acceleration_limits]\n"
        )
        return self._write_yaml(file_path, {"joint_limits": joint_limits}, header=header)

    def output_setup_assistant_file(self, file_path: str) -> bool:
        """Write the hidden settings file used to re-open this package for editing"""
        data = {
            "moveit_setup_assistant_config": {
                "URDF": {
                    "package": self.urdf_pkg_name,
                    "relative_path": self.urdf_pkg_relative_path,
                },
                "SRDF": {
                    "relative_path": self.srdf_pkg_relative_path,
                },
                "CONFIG": {
                    "generated_timestamp": int(time.time()),
                },
            }
        }
        return self._write_yaml(file_path, data)

    def load_setup_assistant_file(self, file_path: str) -> bool:
        """Read back a .setup_assistant file written by output_setup_assistant_file"""
        try:
            with open(file_path, "r") as f:
                doc = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Unable to load setup assistant file {file_path}: {e}")
            return False

        config = (doc or {}).get("moveit_setup_assistant_config") if isinstance(doc, dict) else None
        if not isinstance(config, dict):
            logger.error(f"{file_path} is not a setup assistant settings file")
            return False

        urdf = config.get("URDF") or {}
        srdf = config.get("SRDF") or {}
        self.urdf_pkg_name = urdf.get("package") or ""
        self.urdf_pkg_relative_path = urdf.get("relative_path") or ""
        self.srdf_pkg_relative_path = srdf.get("relative_path") or ""
        return True
