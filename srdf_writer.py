#!/usr/bin/env python3
"""
SRDF Writer - serializes the semantic robot description to an SRDF file
"""

import logging
import xml.etree.ElementTree as ET

from moveit_config_data import SRDFModel

logger = logging.getLogger(__name__)

SRDF_HEADER_COMMENT = (
    "This does not replace URDF, and is not an extension of URDF.\n"
    "    This is a format for representing semantic information about the robot structure.\n"
    "    A URDF file must exist for this robot as well, where the joints and the links that are referenced are defined\n"
)


def _format_value(values) -> str:
    return " ".join(f"{v:g}" for v in values)


class SRDFWriter:
    """Writes an SRDFModel as SRDF XML"""

    def __init__(self, srdf: SRDFModel):
        self.srdf = srdf

    def _build_tree(self) -> ET.Element:
        srdf = self.srdf
        robot = ET.Element("robot", {"name": srdf.robot_name})

        if srdf.groups:
            robot.append(ET.Comment(
                "GROUPS: Representation of a set of joints and links. This can be useful for specifying DOF to plan for, "
                "defining arms, end effectors, etc"
            ))
        for group in srdf.groups:
            group_el = ET.SubElement(robot, "group", {"name": group.name})
            for link in group.links:
                ET.SubElement(group_el, "link", {"name": link})
            for joint in group.joints:
                ET.SubElement(group_el, "joint", {"name": joint})
            for base_link, tip_link in group.chains:
                ET.SubElement(group_el, "chain", {"base_link": base_link, "tip_link": tip_link})
            for subgroup in group.subgroups:
                ET.SubElement(group_el, "group", {"name": subgroup})

        if srdf.group_states:
            robot.append(ET.Comment(
                "GROUP STATES: Purpose: Define a named state for a particular group, in terms of joint values. "
                "This is useful to define states like 'folded arms'"
            ))
        for state in srdf.group_states:
            state_el = ET.SubElement(robot, "group_state", {"name": state.name, "group": state.group})
            for joint_name, values in state.joint_values.items():
                ET.SubElement(state_el, "joint", {"name": joint_name, "value": _format_value(values)})

        if srdf.end_effectors:
            robot.append(ET.Comment("END EFFECTOR: Purpose: Represent information about an end effector."))
        for ee in srdf.end_effectors:
            attrib = {"name": ee.name, "parent_link": ee.parent_link, "group": ee.component_group}
            if ee.parent_group:
                attrib["parent_group"] = ee.parent_group
            ET.SubElement(robot, "end_effector", attrib)

        if srdf.virtual_joints:
            robot.append(ET.Comment(
                "VIRTUAL JOINT: Purpose: this element defines a virtual joint between a robot link and an external "
                "frame of reference (considered fixed with respect to the robot)"
            ))
        for vj in srdf.virtual_joints:
            ET.SubElement(robot, "virtual_joint", {
                "name": vj.name,
                "type": vj.type,
                "parent_frame": vj.parent_frame,
                "child_link": vj.child_link,
            })

        for pj in srdf.passive_joints:
            ET.SubElement(robot, "passive_joint", {"name": pj.name})

        if srdf.disabled_collisions:
            robot.append(ET.Comment(
                "DISABLE COLLISIONS: By default it is assumed that any link of the robot could potentially come "
                "into collision with any other link in the robot. This tag disables collision checking between a "
                "specified pair of links."
            ))
        for dc in srdf.disabled_collisions:
            attrib = {"link1": dc.link1, "link2": dc.link2}
            if dc.reason:
                attrib["reason"] = dc.reason
            ET.SubElement(robot, "disable_collisions", attrib)

        return robot

    def get_srdf_string(self) -> str:
        robot = self._build_tree()
        ET.indent(robot, space="    ")
        body = ET.tostring(robot, encoding="unicode")
        return f'<?xml version="1.0" ?>\n<!--{SRDF_HEADER_COMMENT}-->\n{body}\n'

    def write_srdf(self, file_path: str) -> bool:
        """Write the SRDF to file_path, truncating any existing file"""
        try:
            with open(file_path, "w") as f:
                f.write(self.get_srdf_string())
        except OSError as e:
            logger.error(f"Unable to open file for writing {file_path}: {e}")
            return False
        logger.debug(f"Wrote SRDF for robot '{self.srdf.robot_name}' to {file_path}")
        return True
