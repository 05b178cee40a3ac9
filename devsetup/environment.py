"""The setup steps for a local React/TypeScript + PostgreSQL project.

``DevEnvironment`` owns one method per step. Each method is idempotent:
it probes first, creates only what is missing, and raises ``StepFailure``
when it cannot finish. ``steps()`` returns them in execution order.
"""

from __future__ import annotations

import json

from dotenv import dotenv_values

from .config import Config, ProjectValues
from .exceptions import MaterializeFailure, PrerequisiteMissing
from .host import HostSystem
from .prompts import Prompter
from .provision import ResourceMaterializer, ResourceProbe
from .scaffolder import ProjectFiles, normalize_license, required_scripts
from .steps import Step, StepId
from .utils import create_progress, print_info, print_success, print_warning

PROJECT_DIRECTORIES: tuple[str, ...] = (
    "scripts",
    "migrations",
    ".vscode",
    "docs",
    "src/integrations/database",
    "src/components/ui",
    "src/hooks",
    "src/lib",
    "src/pages",
    "public",
)

# Asked, in this order, when the environment file is first written.
ENV_FILE_FIELDS: tuple[str, ...] = (
    "db_host",
    "db_port",
    "db_name",
    "db_user",
    "db_password",
    "api_url",
)


class DevEnvironment:
    """Provisioning steps bound to one configuration.

    Args:
        config: Run configuration; its ``values`` are filled in as steps
            need them.
        host: Command boundary (real or fake).
        prompter: Source of operator answers.
        files: Renderer for generated file contents.
    """

    def __init__(
        self,
        config: Config,
        host: HostSystem,
        prompter: Prompter,
        files: ProjectFiles | None = None,
    ) -> None:
        self.config = config
        self.host = host
        self.prompter = prompter
        self.files = files or ProjectFiles()
        toolchain = config.toolchain
        self.probe = ResourceProbe(host, package_manager=toolchain.package_manager)
        self.materializer = ResourceMaterializer(
            host,
            self.probe,
            config.project_dir,
            package_manager=toolchain.package_manager,
            installer_url=toolchain.installer_url,
            settle_seconds=toolchain.service_settle_seconds,
        )

    @property
    def values(self) -> ProjectValues:
        return self.config.values

    def steps(self) -> list[Step]:
        """All steps, in the order a full run executes them."""
        return [
            Step(StepId.PACKAGE_MANAGER, "Check Homebrew", self.check_package_manager),
            Step(StepId.TOOLS, "Install Tools", self.install_tools),
            Step(StepId.DATABASE_SERVICE, "Start PostgreSQL", self.start_database_service),
            Step(StepId.DATABASE, "Create Database", self.create_database),
            Step(StepId.ENV_FILE, "Create Environment File", self.create_env_file),
            Step(StepId.DIRECTORIES, "Create Directories", self.create_directories),
            Step(StepId.MIGRATION_SCRIPT, "Create Migration Script", self.create_migration_script),
            Step(StepId.INITIAL_MIGRATION, "Create Initial Migration", self.create_initial_migration),
            Step(StepId.EDITOR_SETTINGS, "Create VSCode Settings", self.create_editor_settings),
            Step(StepId.README, "Create README", self.create_readme),
            Step(StepId.LICENSE, "Create LICENSE", self.create_license),
            Step(StepId.CONTRIBUTING, "Create Contributing Guidelines", self.create_contributing),
            Step(StepId.DEPENDENCIES, "Install Dependencies", self.install_dependencies),
            Step(StepId.PACKAGE_SCRIPTS, "Update package.json Scripts", self.update_package_scripts),
            Step(StepId.MIGRATIONS, "Run Migrations", self.run_migrations),
            Step(StepId.DATABASE_CLIENT, "Create Database Client", self.create_database_client),
        ]

    def project_env(self) -> dict[str, str]:
        """Variables from ``.env.local`` for child node processes."""
        if not self.probe.file_exists(self.config.env_file_path):
            return {}
        loaded = dotenv_values(self.config.env_file_path)
        return {key: value for key, value in loaded.items() if value is not None}

    # ------------------------------------------------------------------
    # Tooling
    # ------------------------------------------------------------------

    def check_package_manager(self) -> None:
        manager = self.config.toolchain.package_manager
        self.materializer.ensure_package_manager(
            lambda: self.prompter.confirm(f"Install {manager} now?")
        )

    def install_tools(self) -> None:
        toolchain = self.config.toolchain
        print_info("Installing core development tools...")
        for tool in toolchain.required_tools:
            self.materializer.ensure_tool(tool)
        self.materializer.ensure_tool(toolchain.database_formula, toolchain.database_binaries)

        optional = toolchain.optional_tools
        if not optional:
            return
        if not self.prompter.confirm(f"Install optional tools ({', '.join(optional)})?"):
            return
        for formula, binary in optional.items():
            try:
                self.materializer.ensure_tool(formula, [binary])
            except MaterializeFailure as exc:
                print_warning(f"Failed to install {formula}: {exc.detail or exc}")

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def start_database_service(self) -> None:
        self.materializer.ensure_service(self.config.toolchain.database_formula)

    def create_database(self) -> None:
        name = self.prompter.fill(self.values, "db_name")
        self.materializer.ensure_database(name)

    def run_migrations(self) -> None:
        if not self.prompter.confirm("Run database migrations now?"):
            print_info("Skipped migrations (run later with: npm run db:migrate)")
            return

        script = self.config.migration_script_path
        if not self.probe.file_exists(script):
            raise PrerequisiteMissing("Migration script not found: scripts/migrate.js")
        if not self.probe.tool_available("node"):
            raise PrerequisiteMissing("node is not installed")

        print_info("Executing migrations...")
        result = self.host.run(["node", "scripts/migrate.js"], env=self.project_env())
        if result.stdout:
            print_info(result.stdout)
        if not result.ok:
            raise MaterializeFailure("database migrations", result.error_text)
        print_success("Database migrations completed")

    # ------------------------------------------------------------------
    # Generated files
    # ------------------------------------------------------------------

    def create_env_file(self) -> None:
        path = self.config.env_file_path
        if self.probe.file_exists(path):
            print_success(".env.local already exists")
            return
        for field in ENV_FILE_FIELDS:
            self.prompter.fill(self.values, field)
        self.materializer.ensure_file(path, self.files.env_file(self.values))

    def create_directories(self) -> None:
        for directory in PROJECT_DIRECTORIES:
            self.materializer.ensure_directory(self.config.project_dir / directory)

    def create_migration_script(self) -> None:
        self.materializer.ensure_file(
            self.config.migration_script_path, self.files.migration_script(self.values)
        )

    def create_initial_migration(self) -> None:
        self.materializer.ensure_file(
            self.config.initial_migration_path, self.files.initial_migration(self.values)
        )

    def create_editor_settings(self) -> None:
        for filename, content in self.files.editor_settings(self.values).items():
            self.materializer.ensure_file(self.config.vscode_dir / filename, content)

    def create_readme(self) -> None:
        path = self.config.readme_path
        if self.probe.file_exists(path):
            print_success("README.md already exists")
            return
        self.prompter.fill(self.values, "project_name")
        self._license_key("README.md")
        self.materializer.ensure_file(path, self.files.readme(self.values))

    def create_contributing(self) -> None:
        path = self.config.contributing_path
        if self.probe.file_exists(path):
            print_success("CONTRIBUTING.md already exists")
            return
        self.prompter.fill(self.values, "project_name")
        self.materializer.ensure_file(path, self.files.contributing(self.values))

    def create_license(self) -> None:
        path = self.config.license_path
        if self.probe.file_exists(path):
            print_success("LICENSE already exists")
            return

        key = self._license_key("LICENSE")
        content = self.files.license(self.values, key)
        if content is None:
            print_info("Skipping license creation")
            return
        self.materializer.ensure_file(path, content)

    def _license_key(self, resource: str) -> str:
        """Ask for the license once and store it in canonical form."""
        choice = self.prompter.fill(self.values, "license_choice")
        try:
            key = normalize_license(choice)
        except ValueError as exc:
            # Forget the answer so a retry asks again.
            self.values.license_choice = None
            raise MaterializeFailure(resource, str(exc)) from exc
        self.values.license_choice = key
        return key

    def create_database_client(self) -> None:
        self.materializer.ensure_file(
            self.config.database_client_path, self.files.database_client(self.values)
        )

    # ------------------------------------------------------------------
    # Node project
    # ------------------------------------------------------------------

    def install_dependencies(self) -> None:
        manifest = self.config.manifest_path
        if not self.probe.file_exists(manifest):
            self.prompter.fill(self.values, "project_name")
            self.prompter.fill(self.values, "db_name")
            self.materializer.ensure_file(manifest, self.files.package_manifest(self.values))

        use_bun = self.prompter.confirm("Use Bun for faster installs?")
        if use_bun and self.probe.tool_available("bun"):
            cmd = ["bun", "install"]
        else:
            if use_bun:
                print_warning("bun not found, falling back to npm")
            cmd = ["npm", "install"]

        if not self.probe.tool_available(cmd[0]):
            raise PrerequisiteMissing(f"{cmd[0]} is not installed")

        with create_progress() as progress:
            progress.add_task(f"Installing with {cmd[0]}...", total=None)
            result = self.host.run(cmd)
        if not result.ok:
            raise MaterializeFailure("project dependencies", result.error_text)
        print_success(f"Dependencies installed with {cmd[0]}")

    def update_package_scripts(self) -> None:
        manifest_path = self.config.manifest_path
        if not self.probe.file_exists(manifest_path):
            print_info("No package.json yet; scripts are added when dependencies are installed")
            return

        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise MaterializeFailure("package.json scripts", str(exc)) from exc
        if not isinstance(manifest, dict):
            raise MaterializeFailure("package.json scripts", "manifest is not a JSON object")

        scripts = manifest.setdefault("scripts", {})
        wanted = required_scripts(self.values.get_or_default("db_name"))
        missing = {name: command for name, command in wanted.items() if name not in scripts}
        if not missing:
            print_success("package.json scripts are up to date")
            return

        scripts.update(missing)
        try:
            manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise MaterializeFailure("package.json scripts", str(exc)) from exc
        print_success(f"Added scripts: {', '.join(missing)}")

    def launch_dev_server(self) -> int:
        """Run the project's dev server in the foreground until it exits.

        Prefers bun when it is installed, otherwise npm.

        Raises:
            PrerequisiteMissing: No ``package.json`` or no package manager.
        """
        if not self.probe.file_exists(self.config.manifest_path):
            raise PrerequisiteMissing("No package.json found. Run setup steps first.")

        if self.probe.tool_available("bun"):
            cmd = ["bun", "run", "dev"]
        elif self.probe.tool_available("npm"):
            cmd = ["npm", "run", "dev"]
        else:
            raise PrerequisiteMissing("No package manager found (install bun or npm)")

        print_info(f"Starting with {cmd[0]}...")
        try:
            result = self.host.run_foreground(cmd, env=self.project_env())
        except KeyboardInterrupt:
            print_info("Development server stopped")
            return 0
        return result.returncode
