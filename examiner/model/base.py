import datetime

import pydantic as p


class BaseModel(p.BaseModel):
    """Root of every record and settings model

    Dumps use field aliases, so settings serialize to the keys `dictConfig`
    expects (`()`, `class`) and bank entries keep their file spelling.
    """

    model_config = p.ConfigDict(serialize_by_alias=True)


class WithCtime(BaseModel):
    create_time: datetime.datetime


class WithMtime(BaseModel):
    update_time: datetime.datetime
