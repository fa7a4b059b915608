#!/usr/bin/env python3
"""
Configuration Files - final screen of the MoveIt Setup Assistant

Lists every file and folder of a MoveIt configuration package, checks that the
robot description is ready, then writes the package to a chosen directory by
copying templates, invoking the description writers and creating folders.
"""

import argparse
import logging
import os
import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from moveit_config_data import (
    KINEMATICS_FILE,
    MoveItConfigData,
    SETUP_ASSISTANT_FILE,
    TEMPLATE_PACKAGE_DIR,
    Group,
    SRDFModel,
    VirtualJoint,
)
from srdf_writer import SRDFWriter

logger = logging.getLogger(__name__)

# Rate (ms) of the static transform publishers emitted for virtual joints
BROADCAST_RATE = 100

CONFIRM_INCOMPLETE = "incomplete"
CONFIRM_OVERWRITE = "overwrite"
CONFIRM_EXIT = "exit"


# ******************************************************************************************
# User prompts
# ******************************************************************************************

def strip_markup(message: str) -> str:
    """Turn the simple HTML used in messages into plain text"""
    text = re.sub(r"<li>", "\n  - ", message)
    text = re.sub(r"<br\s*/?>", "\n", text)
    return re.sub(r"<[^>]+>", "", text)


class Prompter(ABC):
    """Shows messages and asks the user to confirm a choice"""

    @abstractmethod
    def confirm(self, kind: str, title: str, message: str) -> bool:
        ...

    def warning(self, title: str, message: str) -> None:
        logger.warning(f"{title}: {strip_markup(message)}")

    def critical(self, title: str, message: str) -> None:
        logger.error(f"{title}: {strip_markup(message)}")


class ConsolePrompter(Prompter):
    """Asks questions on the terminal; assume_yes answers every question with Ok"""

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes

    def confirm(self, kind: str, title: str, message: str) -> bool:
        print(f"\n{title}\n{strip_markup(message)}")
        if self.assume_yes:
            return True
        try:
            answer = input("Continue? [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")


class RecordingPrompter(Prompter):
    """Answers questions from preset choices and keeps every message shown"""

    def __init__(self, answers: Optional[Dict[str, bool]] = None, default: bool = False):
        self.answers = dict(answers or {})
        self.default = default
        self.messages: List[Dict[str, str]] = []

    def confirm(self, kind: str, title: str, message: str) -> bool:
        self.messages.append({"level": "question", "kind": kind, "title": title, "message": message})
        return self.answers.get(kind, self.default)

    def warning(self, title: str, message: str) -> None:
        super().warning(title, message)
        self.messages.append({"level": "warning", "kind": "", "title": title, "message": message})

    def critical(self, title: str, message: str) -> None:
        super().critical(title, message)
        self.messages.append({"level": "critical", "kind": "", "title": title, "message": message})

    @property
    def last(self) -> Optional[Dict[str, str]]:
        return self.messages[-1] if self.messages else None


# ******************************************************************************************
# Generation tasks
# ******************************************************************************************

@dataclass(frozen=True)
class RenderTemplate:
    template_path: str


@dataclass(frozen=True)
class InvokeExternalWriter:
    writer: str


@dataclass(frozen=True)
class CreateDirectory:
    pass


GenerateAction = Union[RenderTemplate, InvokeExternalWriter, CreateDirectory]


@dataclass
class GenerateFile:
    """One file or folder of the generated package"""
    file_name: str
    rel_path: str
    description: str
    action: GenerateAction
    generate: bool = True

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file_name": self.file_name,
            "rel_path": self.rel_path,
            "description": self.description,
            "generate": self.generate,
            "action": type(self.action).__name__,
        }
        data.update(asdict(self.action))
        return data


# ******************************************************************************************
# Template rendering
# ******************************************************************************************

def urdf_location(config_data: MoveItConfigData) -> str:
    if not config_data.urdf_pkg_name:
        return config_data.urdf_path
    return f"$(find {config_data.urdf_pkg_name})/{config_data.urdf_pkg_relative_path}"


def virtual_joint_broadcasters(virtual_joints: List[VirtualJoint]) -> str:
    """Static transform publisher lines for every non-fixed virtual joint"""
    lines = []
    for index, vj in enumerate(virtual_joints):
        if vj.type == "fixed":
            continue
        lines.append(
            f'  <node pkg="tf" type="static_transform_publisher" name="virtual_joint_broadcaster_{index}" '
            f'args="0 0 0 0 0 0 {vj.parent_frame} {vj.child_link} {BROADCAST_RATE}" />\n'
        )
    return "".join(lines)


def build_substitutions(config_data: MoveItConfigData, package_name: str) -> Dict[str, str]:
    return {
        "[GENERATED_PACKAGE_NAME]": package_name,
        "[URDF_LOCATION]": urdf_location(config_data),
        "[ROBOT_NAME]": config_data.srdf.robot_name,
        "[VIRTUAL_JOINT_BROADCASTER]": virtual_joint_broadcasters(config_data.srdf.virtual_joints),
    }


def render_template(template_path: str, output_path: str, substitutions: Dict[str, str]) -> bool:
    """Copy template_path to output_path, replacing each placeholder literally"""
    template_file = Path(template_path)
    if not template_file.is_file():
        logger.error(f"Unable to find template file {template_path}")
        return False

    try:
        template_string = template_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Unable to load file {template_path}: {e}")
        return False

    for placeholder, value in substitutions.items():
        template_string = template_string.replace(placeholder, value)

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(template_string)
    except OSError as e:
        logger.error(f"Unable to open file for writing {output_path}: {e}")
        return False

    return True


# ******************************************************************************************
# Files to be generated
# ******************************************************************************************

# (file name, template name, description); file names may use {robot_name}
LAUNCH_FILES = [
    ("move_group.launch", "move_group.launch",
     "Launches the move_group node that provides the MoveGroup action and other parameters "
     "<a href='http://moveit.ros.org/move_group.html'>MoveGroup action</a>"),
    ("planning_context.launch", "planning_context.launch",
     "Loads settings for the ROS parameter server, required for running MoveIt. This includes the SRDF, "
     "joints_limits.yaml file, ompl_planning.yaml file, optionally the URDF, etc"),
    ("moveit_rviz.launch", "moveit_rviz.launch",
     "Visualize in Rviz the robot's planning groups running with interactive markers that allow goal states to be set."),
    ("ompl_planning_pipeline.launch", "ompl_planning_pipeline.launch",
     "Intended to be included in other launch files that require the OMPL planning plugin. Defines the proper "
     "plugin name on the parameter server and a default selection of planning request adapters."),
    ("planning_pipeline.launch", "planning_pipeline.launch",
     "Helper launch file that can choose between different planning pipelines to be loaded."),
    ("warehouse_settings.launch", "warehouse_settings.launch",
     "Helper launch file that specifies default settings for MongoDB."),
    ("warehouse.launch", "warehouse.launch",
     "Launch file for starting MongoDB."),
    ("run_benchmark_server_ompl.launch", "run_benchmark_server_ompl.launch",
     "Launch file for benchmarking OMPL planners"),
    ("sensor_manager.launch", "sensor_manager.launch",
     "Helper launch file that can choose between different sensor managers to be loaded."),
    ("{robot_name}_moveit_controller_manager.launch", "moveit_controller_manager.launch",
     "Placeholder for settings specific to the MoveIt controller manager implemented for your robot."),
    ("{robot_name}_moveit_sensor_manager.launch", "moveit_sensor_manager.launch",
     "Placeholder for settings specific to the MoveIt sensor manager implemented for your robot."),
    ("trajectory_execution.launch", "trajectory_execution.launch",
     "Loads settings for the ROS parameter server required for executing trajectories using the "
     "trajectory_execution_manager::TrajectoryExecutionManager."),
    ("demo.launch", "demo.launch",
     "Run a demo of MoveIt."),
    ("setup_assistant.launch", "edit_configuration_package.launch",
     "Launch file for easily re-starting the MoveIt Setup Assistant to edit this robot's generated configuration package."),
]


def load_gen_files(config_data: MoveItConfigData, prompter: Prompter) -> Optional[List[GenerateFile]]:
    """Build the ordered list of files and folders of the configuration package"""
    append_paths = config_data.append_paths
    robot_name = config_data.srdf.robot_name
    gen_files: List[GenerateFile] = []

    template_package_path = append_paths(config_data.setup_assistant_path, TEMPLATE_PACKAGE_DIR)
    config_data.template_package_path = template_package_path
    if not os.path.isdir(template_package_path):
        prompter.critical("Error Generating", f"Unable to find package template directory: {template_package_path}")
        return None

    # ROS package files ---------------------------------------------------------------------
    # The template is named package.xml.template so the template directory is not indexed as a package
    gen_files.append(GenerateFile(
        file_name="package.xml",
        rel_path="package.xml",
        description="Defines a ROS package",
        action=RenderTemplate(append_paths(template_package_path, "package.xml.template")),
    ))
    gen_files.append(GenerateFile(
        file_name="CMakeLists.txt",
        rel_path="CMakeLists.txt",
        description="CMake build system configuration file",
        action=RenderTemplate(append_paths(template_package_path, "CMakeLists.txt")),
    ))

    # Config files --------------------------------------------------------------------------
    config_path = "config"
    gen_files.append(GenerateFile(
        file_name="config/",
        rel_path="config/",
        description="Folder containing all MoveIt configuration files for your robot",
        action=CreateDirectory(),
    ))

    srdf_file = GenerateFile(
        file_name=f"{robot_name}.srdf",
        rel_path=append_paths(config_path, f"{robot_name}.srdf"),
        description="SRDF (<a href='http://www.ros.org/wiki/srdf'>Semantic Robot Description Format</a>) is a "
                    "representation of semantic information about robots. This format is intended to represent "
                    "information about the robot that is not in the URDF file, but it is useful for a variety of "
                    "applications. The intention is to include information that has a semantic aspect to it.",
        action=InvokeExternalWriter("srdf"),
    )
    gen_files.append(srdf_file)
    # The .setup_assistant file records where the SRDF lives inside the package
    config_data.srdf_pkg_relative_path = srdf_file.rel_path

    gen_files.append(GenerateFile(
        file_name="ompl_planning.yaml",
        rel_path=append_paths(config_path, "ompl_planning.yaml"),
        description="Configures the OMPL (<a href='http://ompl.kavrakilab.org/'>Open Motion Planning Library</a>) "
                    "planning plugin. For every planning group defined in the SRDF, a number of planning "
                    "configurations are specified (under planner_configs). Additionally, default settings for the "
                    "state space to plan in for a particular group can be specified, such as the collision checking "
                    "resolution. Each planning configuration specified for a group must be defined under the "
                    "planner_configs tag. While defining a planner configuration, the only mandatory parameter is "
                    "'type', which is the name of the motion planner to be used. Any other planner-specific "
                    "parameters can be defined but are optional.",
        action=InvokeExternalWriter("ompl_planning"),
    ))
    gen_files.append(GenerateFile(
        file_name="kinematics.yaml",
        rel_path=KINEMATICS_FILE,
        description="Specifies which kinematic solver plugin to use for each planning group in the SRDF, as well "
                    "as the kinematic solver search resolution.",
        action=InvokeExternalWriter("kinematics"),
    ))
    gen_files.append(GenerateFile(
        file_name="joint_limits.yaml",
        rel_path=append_paths(config_path, "joint_limits.yaml"),
        description="Contains additional information about joints that appear in your planning groups that is not "
                    "contained in the URDF, as well as allowing you to set maximum and minimum limits for velocity "
                    "and acceleration than those contained in your URDF. This information is used by our trajectory "
                    "filtering system to assign reasonable velocities and timing for the trajectory before it is "
                    "passed to the robots controllers.",
        action=InvokeExternalWriter("joint_limits"),
    ))

    # Launch files --------------------------------------------------------------------------
    launch_path = "launch"
    template_launch_path = append_paths(template_package_path, launch_path)
    gen_files.append(GenerateFile(
        file_name="launch/",
        rel_path="launch/",
        description="Folder containing all MoveIt launch files for your robot",
        action=CreateDirectory(),
    ))

    for file_name, template_name, description in LAUNCH_FILES:
        file_name = file_name.format(robot_name=robot_name)
        gen_files.append(GenerateFile(
            file_name=file_name,
            rel_path=append_paths(launch_path, file_name),
            description=description,
            action=RenderTemplate(append_paths(template_launch_path, template_name)),
        ))

    # Other files ---------------------------------------------------------------------------
    gen_files.append(GenerateFile(
        file_name=SETUP_ASSISTANT_FILE,
        rel_path=SETUP_ASSISTANT_FILE,
        description="MoveIt Setup Assistant hidden settings file. You should not need to edit this file.",
        action=InvokeExternalWriter("setup_assistant"),
    ))

    logger.info(f"Loaded {len(gen_files)} files to generate for robot '{robot_name}'")
    return gen_files


# ******************************************************************************************
# Readiness checks
# ******************************************************************************************

def missing_dependencies(srdf: SRDFModel) -> List[str]:
    dependencies = []
    if not srdf.groups:
        dependencies.append("No robot model planning groups have been created")
    if not srdf.disabled_collisions:
        dependencies.append("No self-collisions have been disabled")
    if not srdf.end_effectors:
        dependencies.append("No end effectors have been added")
    if not srdf.virtual_joints:
        dependencies.append("No virtual joints have been added")
    return dependencies


def check_dependencies(srdf: SRDFModel, prompter: Prompter) -> bool:
    """Remind the user of optional setup steps that were skipped; False if they cancel"""
    dependencies = missing_dependencies(srdf)
    if not dependencies:
        return True

    message = (
        "Some setup steps have not been completed. None of the steps are required, but here is a reminder of "
        "what was not filled in, just in case something was forgotten:<br /><ul>"
    )
    message += "".join(f"<li>{dependency}</li>" for dependency in dependencies)
    message += "</ul><br/>Press Ok to continue generating files."

    return prompter.confirm(CONFIRM_INCOMPLETE, "Incomplete MoveIt Setup Assistant Steps", message)


def find_empty_group(srdf: SRDFModel) -> Optional[Group]:
    for group in srdf.groups:
        if group.is_empty():
            return group
    return None


def no_groups_empty(srdf: SRDFModel, prompter: Prompter) -> bool:
    """False when a planning group has no joints, links, chains or subgroups"""
    group = find_empty_group(srdf)
    if group is None:
        return True
    prompter.warning(
        "Empty Group",
        f"The planning group '{group.name}' is empty and has no subcomponents associated with it "
        "(joints/links/chains/subgroups). You must edit or remove this planning group before this "
        "configuration package can be saved.",
    )
    return False


def get_package_name(package_path: str) -> str:
    """Last folder name of package_path, or 'unknown'"""
    if package_path.endswith("/"):
        package_path = package_path[:-1]
    return os.path.basename(package_path) or "unknown"


# ******************************************************************************************
# Package generation
# ******************************************************************************************

class GenerationState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


class ConfigurationFilesScreen:
    """Generate Configuration Files screen for one setup assistant session"""

    def __init__(self, config_data: MoveItConfigData, prompter: Optional[Prompter] = None,
                 on_progress: Optional[Callable[[int], None]] = None):
        self.config_data = config_data
        self.prompter = prompter or ConsolePrompter()
        # Called after every generated file so a UI loop can redraw progress
        self.on_progress = on_progress

        self.gen_files: List[GenerateFile] = []
        self.first_focus_given = True
        self.has_generated_pkg = False
        self.action_num = 0
        self.progress = 0
        self.state = GenerationState.IDLE
        self.new_package_name = ""
        self.last_error: Optional[str] = None
        self._substitutions: Dict[str, str] = {}

    def writers(self) -> Dict[str, Callable[[str], bool]]:
        config_data = self.config_data
        return {
            "srdf": SRDFWriter(config_data.srdf).write_srdf,
            "ompl_planning": config_data.output_ompl_planning_yaml,
            "kinematics": config_data.output_kinematics_yaml,
            "joint_limits": config_data.output_joint_limits_yaml,
            "setup_assistant": config_data.output_setup_assistant_file,
        }

    # --------------------------------------------------------------------------------------
    # Screen events
    # --------------------------------------------------------------------------------------

    def focus_given(self) -> bool:
        """Load the list of files the first time the screen is shown"""
        if not self.first_focus_given:
            return bool(self.gen_files)
        self.first_focus_given = False
        return self._load_gen_files()

    def _load_gen_files(self) -> bool:
        gen_files = load_gen_files(self.config_data, self.prompter)
        if gen_files is None:
            self.gen_files = []
            self.last_error = "Unable to find package template directory"
            return False
        self.gen_files = gen_files
        return True

    def change_action_desc(self, index: int) -> Optional[str]:
        if index < 0 or index >= len(self.gen_files):
            return None
        return self.gen_files[index].description

    def set_generate(self, index: int, generate: bool) -> None:
        self.gen_files[index].generate = generate

    def skip(self, rel_path: str) -> bool:
        for gen_file in self.gen_files:
            if gen_file.rel_path.rstrip("/") == rel_path.rstrip("/"):
                gen_file.generate = False
                return True
        return False

    def update_progress(self) -> None:
        self.action_num += 1
        self.progress = int(self.action_num / len(self.gen_files) * 100)
        if self.on_progress:
            self.on_progress(self.progress)

    def save_package(self, package_path: str) -> bool:
        """Generate button: run the generation and record success for this session"""
        self.action_num = 0
        self.progress = 0

        if not self.generate_package(package_path):
            logger.error("Failed to generate entire configuration package")
            return False

        self.progress = 100
        self.has_generated_pkg = True
        logger.info(f"Configuration package generated successfully at {package_path.strip()}")
        return True

    def exit_setup_assistant(self, prompter: Optional[Prompter] = None) -> bool:
        if self.has_generated_pkg:
            return True
        return (prompter or self.prompter).confirm(CONFIRM_EXIT, "Exit Setup Assistant",
                                                   "Are you sure you want to exit the MoveIt Setup Assistant?")

    # --------------------------------------------------------------------------------------
    # Generation
    # --------------------------------------------------------------------------------------

    def _fail(self, title: str, message: str, critical: bool = False) -> bool:
        self.state = GenerationState.FAILED
        self.last_error = message
        if critical:
            self.prompter.critical(title, message)
        else:
            self.prompter.warning(title, message)
        return False

    def _abort(self) -> bool:
        self.state = GenerationState.ABORTED
        self.last_error = "Cancelled by user"
        logger.info("Package generation cancelled")
        return False

    def check_dependencies(self) -> bool:
        return check_dependencies(self.config_data.srdf, self.prompter)

    def no_groups_empty(self) -> bool:
        return no_groups_empty(self.config_data.srdf, self.prompter)

    def generate_package(self, package_path: str) -> bool:
        """Validate the target directory and write every selected file, stopping at the first failure"""
        self.state = GenerationState.VALIDATING
        self.last_error = None

        new_package_path = (package_path or "").strip()
        if not new_package_path:
            return self._fail("Error Generating",
                              "No package path provided. Please choose a directory location to generate "
                              "the MoveIt configuration files.")

        if not self.check_dependencies():
            return self._abort()

        if not self.no_groups_empty():
            self.state = GenerationState.FAILED
            self.last_error = "Empty planning group"
            return False

        self.new_package_name = get_package_name(new_package_path)

        if not self.gen_files:
            self.first_focus_given = False
            if not self._load_gen_files():
                self.state = GenerationState.FAILED
                return False

        # Make sure an existing folder is a setup assistant package and confirm overwrite
        setup_assistant_file = self.config_data.append_paths(new_package_path, SETUP_ASSISTANT_FILE)
        package_dir = Path(new_package_path)
        if package_dir.is_dir() and any(package_dir.iterdir()):
            if not os.path.isfile(setup_assistant_file):
                return self._fail(
                    "Incorrect Folder/Package",
                    "The chosen package location already exists but was not previously created using this "
                    "MoveIt Setup Assistant. If this is a mistake, replace the missing file: "
                    f"{setup_assistant_file}",
                )
            if not self.prompter.confirm(
                CONFIRM_OVERWRITE,
                "Confirm Package Update",
                "Are you sure you want to overwrite this existing package with updated configurations?"
                f"<br /><i>{new_package_path}</i>",
            ):
                return self._abort()
        else:
            try:
                package_dir.mkdir(exist_ok=True)
            except OSError as e:
                logger.error(f"Unable to create directory {new_package_path}: {e}")
                return self._fail("Error Generating Files", f"Unable to create directory {new_package_path}",
                                  critical=True)

        # Create the files and folders in order ------------------------------------------------
        self.state = GenerationState.EXECUTING
        self._substitutions = build_substitutions(self.config_data, self.new_package_name)
        writers = self.writers()

        for gen_file in self.gen_files:
            if not gen_file.generate:
                continue

            absolute_path = self.config_data.append_paths(new_package_path, gen_file.rel_path)
            logger.debug(f"Creating file {absolute_path}")

            if not self._run_action(gen_file.action, absolute_path, writers):
                return self._fail(
                    "Error Generating File",
                    f"Failed to generate folder or file: '{gen_file.rel_path}' at location:\n{absolute_path}",
                    critical=True,
                )
            self.update_progress()

        self.state = GenerationState.SUCCEEDED
        return True

    def _run_action(self, action: GenerateAction, absolute_path: str,
                    writers: Dict[str, Callable[[str], bool]]) -> bool:
        if isinstance(action, RenderTemplate):
            return self.copy_template(action.template_path, absolute_path)
        if isinstance(action, CreateDirectory):
            return self.create_folder(absolute_path)
        if isinstance(action, InvokeExternalWriter):
            writer = writers.get(action.writer)
            if writer is None:
                logger.error(f"No writer registered for '{action.writer}'")
                return False
            return writer(absolute_path)
        raise TypeError(f"Unknown generate action: {action!r}")

    def copy_template(self, template_path: str, output_path: str) -> bool:
        """Render a template with the placeholders of the package being generated"""
        if not self._substitutions:
            self._substitutions = build_substitutions(self.config_data, self.new_package_name or "unknown")
        return render_template(template_path, output_path, self._substitutions)

    @staticmethod
    def create_folder(output_path: str) -> bool:
        try:
            Path(output_path).mkdir(exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create directory {output_path}: {e}")
            return False
        return True


# ******************************************************************************************
# Command line
# ******************************************************************************************

def add_config_data_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--urdf", required=True, help="Path to the robot URDF")
    parser.add_argument("--srdf", help="Path to the robot SRDF (defaults to the one recorded in --config-pkg)")
    parser.add_argument("--urdf-package", default="", help="ROS package containing the URDF")
    parser.add_argument("--urdf-package-path", default="", help="Path of the URDF relative to --urdf-package")
    parser.add_argument("--config-pkg", help="Existing configuration package to update")
    parser.add_argument("--setup-assistant-path", default=None,
                        help="Directory containing templates/moveit_config_pkg_template")
    parser.add_argument("--kinematics-solver", action="append", default=[], metavar="GROUP=PLUGIN",
                        help="Kinematics solver plugin for a planning group (repeatable)")


def config_data_from_args(args: argparse.Namespace) -> MoveItConfigData:
    """Load description state from the command line options"""
    config_data = MoveItConfigData.from_files(
        args.urdf,
        urdf_pkg_name=args.urdf_package,
        urdf_pkg_relative_path=args.urdf_package_path,
        config_pkg_path=args.config_pkg or "",
        setup_assistant_path=args.setup_assistant_path,
    )

    srdf_path = args.srdf
    if args.config_pkg:
        settings_file = config_data.append_paths(args.config_pkg, SETUP_ASSISTANT_FILE)
        if not config_data.load_setup_assistant_file(settings_file):
            raise ValueError(f"{args.config_pkg} is not a MoveIt configuration package")
        # Command line values take precedence over the recorded ones
        config_data.urdf_pkg_name = args.urdf_package or config_data.urdf_pkg_name
        config_data.urdf_pkg_relative_path = args.urdf_package_path or config_data.urdf_pkg_relative_path
        if not srdf_path and config_data.srdf_pkg_relative_path:
            srdf_path = config_data.append_paths(args.config_pkg, config_data.srdf_pkg_relative_path)
        kinematics_file = config_data.append_paths(args.config_pkg, KINEMATICS_FILE)
        if os.path.isfile(kinematics_file) and not config_data.load_kinematics_yaml(kinematics_file):
            raise ValueError(f"Unable to read kinematics settings from {kinematics_file}")

    if srdf_path:
        config_data.load_srdf(srdf_path)

    for setting in args.kinematics_solver:
        group_name, sep, plugin = setting.partition("=")
        if not sep or not group_name or not plugin:
            raise ValueError(f"Kinematics solver must be given as GROUP=PLUGIN, got '{setting}'")
        config_data.set_kinematics_solver(group_name, plugin)
    return config_data


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a MoveIt configuration package for a robot")
    parser.add_argument("package_path", nargs="?", help="Directory to write the configuration package to")
    add_config_data_arguments(parser)
    parser.add_argument("--skip", action="append", default=[], metavar="REL_PATH",
                        help="Do not generate this file (repeatable)")
    parser.add_argument("--list", action="store_true", help="List the files to be generated and exit")
    parser.add_argument("-y", "--yes", action="store_true", help="Answer Ok to every confirmation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file created")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config_data = config_data_from_args(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    screen = ConfigurationFilesScreen(
        config_data,
        ConsolePrompter(assume_yes=args.yes),
        on_progress=lambda progress: logger.info(f"Progress: {progress}%"),
    )
    if not screen.focus_given():
        return 1

    if args.list:
        for gen_file in screen.gen_files:
            print(f"{gen_file.rel_path:<50} {strip_markup(gen_file.description)}")
        return 0

    for rel_path in args.skip:
        if not screen.skip(rel_path):
            parser.error(f"Unknown file to skip: {rel_path}")

    package_path = args.package_path or args.config_pkg
    if not package_path:
        parser.error("package_path is required unless --list is given")

    if not screen.save_package(package_path):
        return 1
    print("Configuration package generated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
