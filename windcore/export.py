from typing import Iterable

from .particles import Segment


def segments_to_geojson(segments: Iterable[Segment]) -> dict:
    feats = []
    for s in segments:
        feats.append({
            "type": "Feature",
            "properties": {"magnitude": float(s.magnitude), "particle": s.index},
            "geometry": {
                "type": "LineString",
                "coordinates": [
                    [float(s.source[0]), float(s.source[1])],
                    [float(s.target[0]), float(s.target[1])],
                ],
            },
        })
    return {"type": "FeatureCollection", "features": feats}
