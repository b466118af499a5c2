"""An entity module that fails while being imported: the marker sits on a plain class."""

from dynamodb_codegen import dynamo_mappable


@dynamo_mappable
class Coordinates:
    lat: float
    lng: float
