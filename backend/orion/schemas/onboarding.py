"""Pydantic schemas for the onboarding wizard and connection tests."""

from pydantic import BaseModel, Field


class P6ConnectionConfig(BaseModel):
    wsdl_base_url: str = Field(default="", alias="wsdlBaseUrl")
    database_instance: str = Field(default="", alias="databaseInstance")
    username: str = ""
    password: str = ""

    model_config = {"populate_by_name": True}

    def missing_fields(self) -> list[str]:
        return [
            alias for alias, value in (
                ("wsdlBaseUrl", self.wsdl_base_url),
                ("databaseInstance", self.database_instance),
                ("username", self.username),
                ("password", self.password),
            )
            if not value.strip()
        ]


class SAPConnectionConfig(BaseModel):
    host_url: str = Field(default="", alias="hostUrl")
    system_id: str = Field(default="", alias="systemId")
    client: str = ""
    username: str = ""
    password: str = ""
    port: int | None = None
    use_hana: bool = Field(default=True, alias="useHana")

    model_config = {"populate_by_name": True}

    def missing_fields(self) -> list[str]:
        return [
            alias for alias, value in (
                ("hostUrl", self.host_url),
                ("systemId", self.system_id),
                ("client", self.client),
                ("username", self.username),
                ("password", self.password),
            )
            if not value.strip()
        ]


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    details: dict | None = None


class P6ProjectListRequest(P6ConnectionConfig):
    filter: str | None = None


class P6Project(BaseModel):
    project_id: int = Field(alias="projectId")
    project_code: str = Field(alias="projectCode")
    project_name: str = Field(alias="projectName")
    status: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    finish_date: str | None = Field(default=None, alias="finishDate")

    model_config = {"populate_by_name": True}


class SelectedProject(BaseModel):
    id: int
    name: str
    code: str


class ProjectSelectionData(BaseModel):
    selected_projects: list[SelectedProject] = Field(default_factory=list, alias="selectedProjects")

    model_config = {"populate_by_name": True}


class OnboardingCompleteRequest(BaseModel):
    tenant_name: str | None = Field(default=None, max_length=255, alias="tenantName")

    model_config = {"populate_by_name": True}
