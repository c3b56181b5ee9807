"""공통 스키마 베이스 - 외부 레코드는 camelCase 필드명을 사용"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case 속성 + camelCase 직렬화 (by_alias=True)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """저장/응답용 JSON 호환 dict"""
        return self.model_dump(mode="json", by_alias=True)
