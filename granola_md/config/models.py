from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

from granola_md.tree import MAX_DEPTH, MAX_DEPTH_LIMIT


class APIConfig(BaseModel):
    base_url: str = "https://api.granola.ai"
    token_env: str = "GRANOLA_TOKEN"
    timeout: float = 30.0
    page_size: int = 100
    page_delay: float = 0.2
    credentials_file: str | None = None


class ImportConfig(BaseModel):
    vault_path: str = "."
    folder: str = ""
    strategy: Literal["update", "skip"] = "update"
    skip_empty: bool = False
    max_filename_length: int = 100


class ContentConfig(BaseModel):
    date_prefix_format: Literal["YYYY-MM-DD", "MM-DD-YYYY", "DD-MM-YYYY", "YYYY.MM.DD", "none"] = (
        "YYYY-MM-DD"
    )
    content_priority: Literal["panel_first", "notes_first", "panel_only", "notes_only"] = (
        "panel_first"
    )
    include_enhanced_frontmatter: bool = False
    include_granola_url: bool = False
    use_custom_filename_template: bool = False
    filename_template: str = "{created_date} - {title}"
    max_depth: int = Field(default=MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT)


class ActionItemsConfig(BaseModel):
    convert_to_tasks: bool = False
    add_task_tag: bool = False
    task_tag_name: str = "#tasks"


class AttendeeTagsConfig(BaseModel):
    enabled: bool = False
    tag_template: str = "person/{name}"
    exclude_my_name: bool = False
    my_name: str = ""
    include_host: bool = False


class GranolaMdConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api: APIConfig = Field(default_factory=APIConfig)
    import_: ImportConfig = Field(default_factory=ImportConfig, alias="import")
    content: ContentConfig = Field(default_factory=ContentConfig)
    action_items: ActionItemsConfig = Field(default_factory=ActionItemsConfig)
    attendee_tags: AttendeeTagsConfig = Field(default_factory=AttendeeTagsConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
