#!/usr/bin/env python3
"""
Config Files Server - FastAPI service for the Generate Configuration Files screen
"""

import logging
import sys
import threading
from typing import Dict, Any, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uvicorn

from configuration_files import (
    CONFIRM_EXIT,
    CONFIRM_INCOMPLETE,
    CONFIRM_OVERWRITE,
    ConfigurationFilesScreen,
    GenerationState,
    RecordingPrompter,
    add_config_data_arguments,
    config_data_from_args,
)
from moveit_config_data import MoveItConfigData

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    package_path: str
    confirm_incomplete: bool = False
    confirm_overwrite: bool = False


class GenerateToggle(BaseModel):
    generate: bool


class ExitRequest(BaseModel):
    confirm: bool = False


class ConfigFilesServer:
    def __init__(self, config_data: MoveItConfigData):
        self.app = FastAPI(
            title="MoveIt Setup Assistant - Configuration Files",
            description="Lists, describes and generates the files of a MoveIt configuration package",
            version="1.0.0"
        )

        # Enable CORS for web clients
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self.config_data = config_data
        self.screen = ConfigurationFilesScreen(config_data, RecordingPrompter())

        # One generation at a time for this session
        self._lock = threading.Lock()

        # Set by run(); /exit asks it to stop
        self.server: Optional[uvicorn.Server] = None

        self._setup_routes()

    def _ensure_files(self) -> None:
        if not self.screen.focus_given():
            last = getattr(self.screen.prompter, "last", None)
            detail = last["message"] if last else self.screen.last_error
            raise HTTPException(status_code=500, detail=detail)

    def _file_index(self, index: int) -> int:
        if index < 0 or index >= len(self.screen.gen_files):
            raise HTTPException(status_code=404, detail=f"No file at index {index}")
        return index

    def _setup_routes(self):
        @self.app.get("/")
        async def root():
            return {
                "message": "MoveIt Setup Assistant configuration files server is running",
                "robot_name": self.config_data.srdf.robot_name,
                "package_name": self.screen.new_package_name,
                "state": self.screen.state.value,
                "has_generated_pkg": self.screen.has_generated_pkg,
            }

        @self.app.get("/files")
        def list_files():
            """List the files to be generated, in generation order"""
            self._ensure_files()
            files = []
            for index, gen_file in enumerate(self.screen.gen_files):
                entry = gen_file.to_dict()
                entry["index"] = index
                files.append(entry)
            return {"files": files}

        @self.app.get("/files/{index}")
        def describe_file(index: int):
            """Description of one file"""
            self._ensure_files()
            index = self._file_index(index)
            gen_file = self.screen.gen_files[index]
            return {
                "index": index,
                "rel_path": gen_file.rel_path,
                "description": self.screen.change_action_desc(index),
                "generate": gen_file.generate,
            }

        @self.app.put("/files/{index}/generate")
        def toggle_file(index: int, toggle: GenerateToggle):
            """Select or skip a file for the next generation"""
            self._ensure_files()
            index = self._file_index(index)
            self.screen.set_generate(index, toggle.generate)
            logger.info(f"{self.screen.gen_files[index].rel_path}: generate={toggle.generate}")
            return {"index": index, "generate": toggle.generate}

        @self.app.post("/generate")
        def generate(request: GenerateRequest):
            """Generate the configuration package"""
            self._ensure_files()
            if not self._lock.acquire(blocking=False):
                raise HTTPException(status_code=409, detail="Package generation already in progress")
            try:
                prompter = RecordingPrompter({
                    CONFIRM_INCOMPLETE: request.confirm_incomplete,
                    CONFIRM_OVERWRITE: request.confirm_overwrite,
                })
                self.screen.prompter = prompter
                success = self.screen.save_package(request.package_path)
            finally:
                self._lock.release()

            if success:
                return {
                    "status": "success",
                    "package_path": request.package_path.strip(),
                    "package_name": self.screen.new_package_name,
                    "progress": self.screen.progress,
                    "messages": prompter.messages,
                }

            last = prompter.last or {"level": "critical", "kind": "", "title": "Error Generating",
                                     "message": self.screen.last_error or "Unknown error"}
            detail: Dict[str, Any] = {
                "state": self.screen.state.value,
                "title": last["title"],
                "message": last["message"],
                "kind": last["kind"],
            }
            if self.screen.state == GenerationState.ABORTED:
                raise HTTPException(status_code=409, detail=detail)
            if last["level"] == "critical":
                raise HTTPException(status_code=500, detail=detail)
            raise HTTPException(status_code=400, detail=detail)

        @self.app.get("/progress")
        async def progress():
            return {"progress": self.screen.progress, "state": self.screen.state.value}

        @self.app.post("/exit")
        def exit_setup_assistant(request: ExitRequest):
            """Exit; asks for confirmation while no package has been generated"""
            if not self.screen.exit_setup_assistant(RecordingPrompter({CONFIRM_EXIT: request.confirm})):
                return {"exit": False, "message": "Are you sure you want to exit the MoveIt Setup Assistant?"}
            logger.info("Exiting setup assistant")
            if self.server is not None:
                self.server.should_exit = True
            return {"exit": True}

    def run(self, host: str = "0.0.0.0", port: int = 8000):
        """Run the server"""
        logger.info(f"Starting configuration files server on {host}:{port}")
        logger.info(f"Robot: {self.config_data.srdf.robot_name}")
        self.server = uvicorn.Server(uvicorn.Config(self.app, host=host, port=port))
        self.server.run()


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="MoveIt Setup Assistant - configuration files server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    add_config_data_arguments(parser)

    args = parser.parse_args(argv)

    try:
        config_data = config_data_from_args(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    server = ConfigFilesServer(config_data)
    server.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
