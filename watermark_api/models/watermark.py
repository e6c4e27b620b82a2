from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import FormData


class WatermarkForm(BaseModel):
    """حقول نموذج رفع العلامة المائية.

    النص وحده يدخل في المعالجة. بقية الحقول مقبولة ومسجلة فقط، ولا تُمرَّر
    إلى معالج المستندات.
    """

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field("", description="نص العلامة المائية.")
    image_path: Optional[str] = Field(default=None, alias="imagePath")
    on_top: Optional[str] = Field(default=None, alias="onTop")
    opacity: Optional[str] = None
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    position: Optional[str] = None
    rotation: Optional[str] = None

    @classmethod
    def from_form(cls, form: FormData) -> "WatermarkForm":
        # الحقول النصية فقط؛ أي ملف مرفوع باسم أحد هذه الحقول يُتجاهل.
        values = {}
        for name in ("text", "imagePath", "onTop", "opacity", "fontSize", "position", "rotation"):
            value = form.get(name)
            if isinstance(value, str):
                values[name] = value
        return cls(**values)

    def unused_fields(self) -> dict:
        return self.model_dump(exclude={"text"}, exclude_none=True, by_alias=True)
