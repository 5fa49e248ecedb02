"""
Demonstration of LayerPath slicing.

This script shows how to:
1. Build a base contour
2. Slice it into layers
3. Add an extrusion variable
4. Export a Sinumerik program
"""

from pathlib import Path

from layerpath.geometry.kernel import Curve
from layerpath.postprocessor import FeedRate, PrinterSettings, ProgramGenerator
from layerpath.slicing import ClosedPlanar2DSlicer


def main():
    """Run slicing demonstration."""
    print("=" * 60)
    print("LayerPath Slicing Demo")
    print("=" * 60)

    output = Path(__file__).parent / "demo_cylinder.mpf"

    # 1. Base contour
    print("\n1. Building base contour")
    contour = Curve.from_circle([0, 0, 0], 200.0)
    print(f"   [OK] Circle with length {contour.get_length():.2f} mm")

    # 2. Slice
    print("\n2. Slicing")
    slicer = ClosedPlanar2DSlicer.from_layer_height(
        contour, seam_location=0.25, seam_length=100.0, distance=20.0, height=10.0, layers=20
    )
    slicer.slice()
    print(f"   [OK] {len(slicer.frames_by_layer)} layers, {len(slicer.frames)} frames")
    print(f"   [OK] Path length: {slicer.get_length() / 1000.0:.3f} m")

    # Show layer breakdown
    print("\n   Layer breakdown:")
    for i, layer in enumerate(slicer.frames_by_layer[:5]):
        print(f"     Layer {i}: {len(layer)} frames, z = {layer[0].xyz[2]:.1f} mm")

    # 3. Extrusion
    print("\n3. Adding extrusion variable")
    slicer.add_variable_by_displacement("E", factor=1.0)
    last = slicer.added_variables["E"][-1][-1]
    print(f"   [OK] E runs from 0 to {last:.1f}")

    # 4. Program
    print("\n4. Generating program")
    lines = ProgramGenerator().create_program([PrinterSettings(), FeedRate(60.0 * 100.0), slicer])
    output.write_text("\n".join(lines) + "\n")
    print(f"   [OK] Wrote {len(lines)} lines to {output.name}")
    print(f"   [OK] Mean frame spacing: {slicer.get_length() / max(len(slicer.frames) - 1, 1):.2f} mm")
    print(f"   [OK] Curvature at start: {slicer.get_curvatures()[0][1].length:.5f} 1/mm")


if __name__ == "__main__":
    main()
