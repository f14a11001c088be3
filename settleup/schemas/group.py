from pydantic import BaseModel

class GroupCreate(BaseModel):
    name: str
    description: str | None = None

class GroupOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    created_by: str

    class Config:
        from_attributes = True
        
class GroupMemberOut(BaseModel):
    user_id: str
    group_id: str
    name: str

    class Config:
        from_attributes = True
