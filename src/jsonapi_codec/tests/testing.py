import dataclasses
import datetime
import typing

from ..declarative import field
from ..native import ZERO_TIME, Float32, Int8, UInt8, UInt64
from ..serde.models import LinkRepr


@dataclasses.dataclass
class Comment:
    id: int = field("primary,comments", default=0)
    client_id: str = field("client-id", default="")
    post_id: int = field("attr,post_id", default=0)
    body: str = field("attr,body", default="")


@dataclasses.dataclass
class Post:
    id: UInt64 = field("primary,posts", default=UInt64(0))
    blog_id: int = field("attr,blog_id", default=0)
    client_id: str = field("client-id", default="")
    title: str = field("attr,title", default="")
    body: str = field("attr,body", default="")
    comments: typing.List[Comment] = field("relation,comments", default_factory=list)
    latest_comment: typing.Optional[Comment] = field("relation,latest_comment", default=None)


@dataclasses.dataclass
class Blog:
    id: int = field("primary,blogs", default=0)
    client_id: str = field("client-id", default="")
    title: str = field("attr,title", default="")
    posts: typing.List[Post] = field("relation,posts", default_factory=list)
    current_post: typing.Optional[Post] = field("relation,current_post", default=None)
    current_post_id: int = field("attr,current_post_id", default=0)
    created_at: datetime.datetime = field("attr,created_at", default=ZERO_TIME)
    view_count: int = field("attr,view_count", default=0)

    def jsonapi_links(self):
        return {
            "self": f"https://example.com/api/blogs/{self.id}",
            "comments": LinkRepr(
                f"https://example.com/api/blogs/{self.id}/comments",
                meta={"counts": {"likes": 4, "comments": 20}},
            ),
        }

    def jsonapi_relationship_links(self, relation):
        if relation == "posts":
            return {
                "related": LinkRepr(
                    f"https://example.com/api/blogs/{self.id}/posts",
                    meta={"count": len(self.posts)},
                ),
            }
        elif relation == "current_post":
            return {
                "self": "https://example.com/api/posts/3",
                "related": LinkRepr(f"https://example.com/api/blogs/{self.id}/current_post"),
            }
        return None

    def jsonapi_meta(self):
        return {"detail": "extra details regarding the blog"}

    def jsonapi_relationship_meta(self, relation):
        if relation == "posts":
            return {"this": {"can": {"go": ["as", "deep", {"as": "required"}]}}}
        elif relation == "current_post":
            return {"detail": "extra current_post detail"}
        return None


@dataclasses.dataclass
class BadComment:
    id: UInt64 = field("primary,bad-comment", default=UInt64(0))
    body: str = field("attr,body", default="")

    def jsonapi_links(self):
        return {"self": ["invalid", "should error"]}


@dataclasses.dataclass
class BadMetaComment:
    id: UInt64 = field("primary,bad-comment", default=UInt64(0))

    def jsonapi_meta(self):
        return ["not", "a", "mapping"]


@dataclasses.dataclass
class BadModel:
    id: int = field("primary", default=0)


@dataclasses.dataclass
class BogusModel:
    id: int = field("primary,bogus-models", default=0)
    x: str = field("bogus,x", default="")


@dataclasses.dataclass
class ModelBadTypes:
    id: str = field("primary,badtypes", default="")
    string_field: str = field("attr,string_field", default="")
    float_field: float = field("attr,float_field", default=0.0)
    time_field: datetime.datetime = field("attr,time_field", default=ZERO_TIME)
    time_ptr_field: typing.Optional[datetime.datetime] = field("attr,time_ptr_field", default=None)


@dataclasses.dataclass
class WithPointer:
    id: typing.Optional[UInt64] = field("primary,with-pointers", default=None)
    name: typing.Optional[str] = field("attr,name", default=None)
    is_active: typing.Optional[bool] = field("attr,is-active", default=None)
    int_val: typing.Optional[int] = field("attr,int-val", default=None)
    float_val: typing.Optional[Float32] = field("attr,float-val", default=None)


@dataclasses.dataclass
class Numeric:
    id: str = field("primary,numeric", default="")
    int_: int = field("attr,int,omitempty", default=0)
    uint: UInt64 = field("attr,uint,omitempty", default=UInt64(0))
    float_: float = field("attr,float,omitempty", default=0.0)
    cmplx: complex = field("attr,cmplx,omitempty", default=0j)


@dataclasses.dataclass
class Narrow:
    id: UInt8 = field("primary,narrows", default=UInt8(0))
    small: Int8 = field("attr,small", default=Int8(0))
    unsigned: UInt8 = field("attr,unsigned", default=UInt8(0))
    single: Float32 = field("attr,single", default=Float32(0.0))


@dataclasses.dataclass
class Timestamp:
    id: int = field("primary,timestamps", default=0)
    time: datetime.datetime = field("attr,timestamp,iso8601", default=ZERO_TIME)
    next: typing.Optional[datetime.datetime] = field("attr,next,iso8601", default=None)


@dataclasses.dataclass
class Car:
    id: typing.Optional[str] = field("primary,cars", default=None)
    make: typing.Optional[str] = field("attr,make,omitempty", default=None)
    model: typing.Optional[str] = field("attr,model,omitempty", default=None)
    year: typing.Optional[UInt64] = field("attr,year,omitempty", default=None)


@dataclasses.dataclass
class Book:
    id: UInt64 = field("primary,books", default=UInt64(0))
    author: str = field("attr,author", default="")
    isbn: str = field("attr,isbn", default="")
    title: str = field("attr,title,omitempty", default="")
    description: typing.Optional[str] = field("attr,description", default=None)
    pages: typing.Optional[UInt64] = field("attr,pages,omitempty", default=None)
    published_at: datetime.datetime = ZERO_TIME
    tags: typing.List[str] = field("attr,tags", default_factory=list)


@dataclasses.dataclass
class Employee:
    firstname: str = field("attr,firstname", default="")
    surname: str = field("attr,surname", default="")
    age: int = field("attr,age", default=0)
    hired_at: typing.Optional[datetime.datetime] = field("attr,hired-at,iso8601", default=None)


@dataclasses.dataclass
class Team:
    name: str = field("attr,name", default="")
    leader: typing.Optional[Employee] = field("attr,leader", default=None)
    members: typing.List[Employee] = field("attr,members", default_factory=list)


@dataclasses.dataclass
class Company:
    id: str = field("primary,companies", default="")
    name: str = field("attr,name", default="")
    boss: Employee = field("attr,boss", default_factory=Employee)
    teams: typing.List[Team] = field("attr,teams", default_factory=list)
    founded_at: datetime.datetime = field("attr,founded-at,iso8601", default=ZERO_TIME)


class CustomIntType(int):
    pass


class CustomFloatType(float):
    pass


class CustomStringType(str):
    pass


@dataclasses.dataclass
class CustomAttributeTypes:
    id: str = field("primary,customtypes", default="")
    int_: CustomIntType = field("attr,int", default=CustomIntType(0))
    int_ptr: typing.Optional[CustomIntType] = field("attr,intptr", default=None)
    int_ptr_null: typing.Optional[CustomIntType] = field("attr,intptrnull", default=None)
    float_: CustomFloatType = field("attr,float", default=CustomFloatType(0.0))
    string: CustomStringType = field("attr,string", default=CustomStringType(""))


@dataclasses.dataclass(eq=False)
class Person:
    id: int = field("primary,people", default=0)
    name: str = field("attr,name", default="")
    friends: typing.List["Person"] = field("relation,friends", default_factory=list)


@dataclasses.dataclass(frozen=True)
class FrozenComment:
    id: int = field("primary,comments", default=0)
    body: str = field("attr,body", default="")


@dataclasses.dataclass
class Address:
    street: str = field("attr,street", default="")


@dataclasses.dataclass
class Resident:
    id: int = field("primary,residents", default=0)
    home: typing.Optional[Address] = field("relation,home", default=None)


@dataclasses.dataclass
class Orphan:
    name: str = field("attr,name")
    count: int = field("attr,count")
    when: datetime.datetime = field("attr,when")
    tags: typing.List[str] = field("attr,tags")
    address: Address = field("attr,address")
    note: typing.Optional[str] = None


def blog_fixture() -> Blog:
    return Blog(
        id=5,
        title="Title 1",
        created_at=datetime.datetime(2016, 8, 17, 8, 27, 12, tzinfo=datetime.timezone.utc),
        posts=[
            Post(
                id=UInt64(1),
                title="Foo",
                body="Bar",
                comments=[Comment(id=1, body="foo"), Comment(id=2, body="bar")],
            ),
            Post(
                id=UInt64(2),
                title="Fuubar",
                body="Bas",
                comments=[Comment(id=1, body="foo"), Comment(id=3, body="bas")],
            ),
        ],
        current_post=Post(
            id=UInt64(1),
            title="Foo",
            body="Bar",
            comments=[Comment(id=1, body="foo"), Comment(id=2, body="bar")],
        ),
    )
