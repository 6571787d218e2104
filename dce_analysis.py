# pylint: disable=R0902
"""dce_analysis.py

This script computes distance to canopy edge (DCE) grids from a canopy height
model (CHM) in ESRI ASCII format. The CHM is optionally binarized with a height
cutoff, then non-directional and/or north and south DCE grids are computed and
saved with the same header as the input. DCE values can also be sampled at
survey point locations (e.g. snow depth survey sites).
"""
from dataclasses import dataclass
from typing import List, Optional
import argparse
import numpy as np
import pandas as pd
import geopandas as gpd
from rasterio.io import DatasetReader
from shapely.geometry import Point

from ascii_grid import grid_to_rasterio, load_ascii_grid, save_ascii_grid
from dce import DEFAULT_STEP_NR, MODES, DCEResult, calc_dce
from grid import binarize_chm


@dataclass
class DCEConfig:
    """Everything a DCE run needs; built from the command line by config_from_args."""
    chm_path: str
    dce_out: Optional[str] = None
    ndce_out: Optional[str] = None
    sdce_out: Optional[str] = None
    mode: str = 'all'
    step_nr: int = DEFAULT_STEP_NR
    binarize: bool = False
    height_cut: float = 2.0
    points_path: Optional[str] = None
    points_out: Optional[str] = None
    verbose: bool = False


def extract_values_from_raster(raster: DatasetReader, points: List[Point]) -> List[float]:
    """Extract values from a raster at given point locations, with bounds checking."""
    values = []
    arr = raster.read(1, masked=True).astype('float64').filled(np.nan)
    nrows, ncols = arr.shape
    for point in points:
        row, col = raster.index(point.x, point.y)
        if 0 <= row < nrows and 0 <= col < ncols:
            values.append(float(arr[row, col]))
        else:
            values.append(float('nan'))
    return values


def sample_dce_at_points(result: DCEResult, points_gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Sample every computed DCE grid at the given points."""
    if not all(points_gdf.geometry.geom_type == 'Point'):
        points_gdf = points_gdf.copy()
        points_gdf.geometry = points_gdf.geometry.centroid
    points = list(points_gdf.geometry)
    samples = points_gdf.copy()
    for name in ('dce', 'ndce', 'sdce'):
        grid = getattr(result, name)
        if grid is None:
            continue
        samples[name] = extract_values_from_raster(grid_to_rasterio(grid), points)
    return samples


def _samples_table(samples: gpd.GeoDataFrame) -> pd.DataFrame:
    table = pd.DataFrame(samples.drop(columns='geometry'))
    table['x'] = samples.geometry.x
    table['y'] = samples.geometry.y
    return table


def _write_samples(samples: gpd.GeoDataFrame, path: str) -> None:
    if path.lower().endswith('.csv'):
        _samples_table(samples).to_csv(path, index=False)
    else:
        samples.to_file(path, driver='GPKG')


def run_dce(config: DCEConfig) -> DCEResult:
    """Load the CHM, compute the DCE grids and write the requested outputs."""
    chm = load_ascii_grid(config.chm_path)
    if config.verbose:
        print(f"Loaded {chm.nrows}x{chm.ncols} CHM from {config.chm_path}")
    if config.binarize:
        chm = binarize_chm(chm, config.height_cut)
    result = calc_dce(chm, config.mode, config.step_nr, verbose=config.verbose)
    outputs = [
        (result.dce, config.dce_out),
        (result.ndce, config.ndce_out),
        (result.sdce, config.sdce_out),
    ]
    for grid, path in outputs:
        if grid is not None and path:
            save_ascii_grid(grid, path)
            if config.verbose:
                print(f"DCE grid saved to {path}")
    if config.points_path:
        points = gpd.read_file(config.points_path)
        samples = sample_dce_at_points(result, points)
        if config.points_out:
            _write_samples(samples, config.points_out)
            if config.verbose:
                print(f"DCE values at {len(samples)} points saved to {config.points_out}")
        else:
            print(_samples_table(samples).to_string(index=False))
    return result


def config_from_args(argv=None) -> DCEConfig:
    """Parse command line arguments into a DCEConfig."""
    parser = argparse.ArgumentParser(
        prog="Distance to canopy edge",
        description="Calculate non-directional and directional distance to canopy edge grids",
        epilog="Algorithm: Mazzotti et al. (2019), Water Resources Research 55(7)"
    )
    parser.add_argument("chm", help="canopy height model or binary canopy grid (.asc)")
    parser.add_argument('--dce-out', help="output file for the non-directional DCE")
    parser.add_argument('--ndce-out', help="output file for the north DCE")
    parser.add_argument('--sdce-out', help="output file for the south DCE")
    parser.add_argument(
        '--mode',
        choices=MODES,
        default='all',
        help="which DCE grids to compute"
    )
    parser.add_argument(
        '--step-nr',
        type=int,
        default=DEFAULT_STEP_NR,
        help="number of iterations; should cover half the diameter of the largest gap"
    )
    parser.add_argument(
        '--binarize',
        action='store_true',
        default=False,
        help="binarize the input CHM with --height-cut"
    )
    parser.add_argument(
        '--height-cut',
        type=float,
        default=2.0,
        help="canopy height threshold used by --binarize"
    )
    parser.add_argument('--points', help="point file to sample the DCE grids at")
    parser.add_argument(
        '--points-out',
        help="output file (.gpkg or .csv) for sampled values; printed if omitted"
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        default=False,
        help="Print progress"
    )
    args = parser.parse_args(argv)
    if args.step_nr < 0:
        parser.error("--step-nr must not be negative")
    if args.mode == 'simple' and (args.ndce_out or args.sdce_out):
        parser.error("--ndce-out/--sdce-out need --mode all or directional")
    if args.mode == 'directional' and args.dce_out:
        parser.error("--dce-out needs --mode all or simple")
    if args.points_out and not args.points:
        parser.error("--points-out needs --points")
    return DCEConfig(
        chm_path=args.chm,
        dce_out=args.dce_out,
        ndce_out=args.ndce_out,
        sdce_out=args.sdce_out,
        mode=args.mode,
        step_nr=args.step_nr,
        binarize=args.binarize,
        height_cut=args.height_cut,
        points_path=args.points,
        points_out=args.points_out,
        verbose=args.verbose,
    )


def main(argv=None):
    """Main entry point for distance to canopy edge analysis."""
    run_dce(config_from_args(argv))


if __name__ == '__main__':
    main()
