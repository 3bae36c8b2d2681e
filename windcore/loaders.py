"""
Build a Field from decoded wind sources.

GFS JSON  list of grib2json records {"header": {...}, "data": [...]}
NetCDF    any xarray dataset with longitude/latitude coords and u/v variables

Decoding itself is left to json and xarray.
"""
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np
import requests
import xarray as xr

from .field import Field

logger = logging.getLogger(__name__)

# "parameterCategory,parameterNumber" of the u and v components
U_CODES = ("1,2", "2,2")
V_CODES = ("1,3", "2,3")

U_NAMES = ("u10", "10u", "UGRD", "u")
V_NAMES = ("v10", "10v", "VGRD", "v")


def load_gfs_json(path) -> list:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def fetch_gfs_json(url: str, timeout: float = 60) -> list:
    logger.info("Fetching GFS JSON: %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def field_from_gfs(records: Iterable[dict]) -> Field:
    t0 = time.perf_counter()
    u_rec = v_rec = None
    for rec in records:
        h = rec["header"]
        code = f"{h['parameterCategory']},{h['parameterNumber']}"
        if code in U_CODES:
            u_rec = rec
        elif code in V_CODES:
            v_rec = rec

    if u_rec is None or v_rec is None:
        missing = [name for name, rec in (("u", u_rec), ("v", v_rec)) if rec is None]
        raise ValueError(f"GFS data is missing the {' and '.join(missing)} component")

    uh = u_rec["header"]
    vh = v_rec["header"]
    for k in ("nx", "ny"):
        if uh.get(k) != vh.get(k):
            raise ValueError(f"U/V grid mismatch on header key '{k}'")

    field = Field(
        xmin=uh["lo1"],
        ymin=uh["la1"],
        xmax=uh["lo2"],
        ymax=uh["la2"],
        delta_x=uh["dx"],
        delta_y=uh["dy"],
        cols=uh["nx"],
        rows=uh["ny"],
        us=u_rec["data"],
        vs=v_rec["data"],
    )
    logger.debug("Formatted GFS data in %.3fs", time.perf_counter() - t0)
    return field


def pick_var(ds: xr.Dataset, candidates: Sequence[str]) -> xr.DataArray:
    for name in candidates:
        if name in ds:
            return ds[name]
    raise ValueError(f"None of {list(candidates)} found in dataset variables: {list(ds.data_vars)}")


def field_from_dataset(ds: xr.Dataset, u_names: Sequence[str] = U_NAMES, v_names: Sequence[str] = V_NAMES) -> Field:
    """
    Rectilinear dataset with 1-D latitude/longitude coords.

    Rows are reordered north to south and columns west to east; any extra
    dimension (time, level, ...) is reduced to its first slice.
    """
    for name in ("latitude", "longitude"):
        if name not in ds.coords:
            raise ValueError(f"Missing {name} coordinate. Coords: {list(ds.coords)}")

    u = pick_var(ds, u_names)
    v = pick_var(ds, v_names)

    def to_grid(da: xr.DataArray) -> xr.DataArray:
        for dim in da.dims:
            if dim not in ("latitude", "longitude"):
                da = da.isel({dim: 0})
        da = da.sortby("latitude", ascending=False).sortby("longitude")
        return da.transpose("latitude", "longitude")

    u = to_grid(u)
    v = to_grid(v)

    lons = np.asarray(u["longitude"].values, dtype=float)
    lats = np.asarray(u["latitude"].values, dtype=float)

    xmin, xmax = float(lons.min()), float(lons.max())
    ymin, ymax = float(lats.min()), float(lats.max())
    cols = lons.size
    rows = lats.size

    return Field(
        xmin=xmin,
        xmax=xmax,
        ymin=ymin,
        ymax=ymax,
        delta_x=(xmax - xmin) / cols,
        delta_y=(ymax - ymin) / rows,
        cols=cols,
        rows=rows,
        us=u.values.astype(float).ravel(),
        vs=v.values.astype(float).ravel(),
    )


def field_from_netcdf(path) -> Field:
    with xr.open_dataset(path) as ds:
        return field_from_dataset(ds)


def download_to_temp(url: str, suffix: str = ".nc") -> str:
    """
    Download 'url' into a temporary file and return its path.
    Caller is responsible for os.remove(path).
    """
    logger.info("Downloading: %s", url)
    resp = requests.get(url, stream=True, timeout=60)
    resp.raise_for_status()

    fd, path = tempfile.mkstemp(suffix=suffix)
    with os.fdopen(fd, "wb") as f:
        for chunk in resp.iter_content(chunk_size=1024 * 1024):
            if chunk:
                f.write(chunk)

    logger.debug("Saved %s to temp file: %s", url, path)
    return path


def field_from_netcdf_url(url: str) -> Field:
    path = download_to_temp(url, suffix=".nc")
    try:
        return field_from_netcdf(path)
    finally:
        if os.path.exists(path):
            os.remove(path)
