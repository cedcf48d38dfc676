# cubraycast

A small first-person raycasting explorer. You walk through a grid map that a
`.cub` scene file describes. It has textured walls, doors you can open and
close, a minimap in the top-left corner and an animated sprite overlay. A run
can also be replayed from a scripted input file (a "TAS" file), so the same
sequence of moves plays out every time.

## Installation

```
pip install .
```

This installs `numpy` and `pygame`. To run the tests, install the `test` extra
(`pip install .[test]`) and run `pytest`.

## Running

```
cubraycast path/to/map.cub
```

To replay scripted input from `inputs.tas` in the current directory first:

```
cubraycast path/to/map.cub --tas
```

Control goes back to you after the scripted steps. If Escape is pressed during
the replay, the game ends instead.

The sprite images `atrebois.jpg`, `sombronces.jpg`, `cravite.jpg`,
`sablieres.jpg` and `leviathe.jpg` must be in a `textures/` directory under the
current directory. The game shows them at a quarter of their size in the
lower-left part of the window and switches to the next one every 40 frames.

The game window is 1920×1080. The frame rate is capped at 360 frames per
second.

If something is wrong, the command prints `Error` and a message on the next
line, then exits with a non-zero status. For example, a missing map file gives
status 2, a directory gives status 4, and a file without the `.cub` extension
gives status 5.

### Controls

| Key          | Action                                 |
|--------------|----------------------------------------|
| W / S        | move forward / back                    |
| A / D        | strafe left / right                    |
| Left / Right | turn                                   |
| Mouse        | turn                                   |
| O            | open or close doors near the player    |
| Escape       | quit                                   |

The mouse pointer is hidden and moved back to the window centre every frame.
Doors can be toggled at most once every 200 ms.

## Scene files

A `.cub` file starts with header lines, in any order. Each header must appear
exactly once:

```
NO ./textures/north.png
SO ./textures/south.png
WE ./textures/west.png
EA ./textures/east.png
DT ./textures/door.png
F 220,100,0
C 225,30,0
```

* `NO`, `SO`, `WE` and `EA` give the wall textures, and `DT` gives the door
  texture. Each file must exist, and each image must be square.
* `F` and `C` set the floor and ceiling colours as `R,G,B`. Spaces are allowed
  around the numbers, and each channel must be between 0 and 255.

The map comes after the header:

```
        1111111111
        1000000001
111111111000D00001
1000000000000N0001
111111111111111111
```

* `1` is a wall.
* `0` is floor.
* `D` is a door, which starts closed.
* `N`, `S`, `E` or `W` marks the player's start cell and the direction the
  player faces. The map must have exactly one.
* Spaces are outside the map.

The map must be closed: no floor, door or start cell may touch a space or the
edge of the map. Empty lines inside the map are not allowed.

## TAS files

Each line of `inputs.tas` holds a frame count, a comma, a space, and the keys
to hold down for that many frames. Every line, including the last one, must
end with a newline:

```
120, W
30, WR
1, O
```

The key letters are `W`, `A`, `S` and `D`, `L` and `R` to turn left and right,
and `O` for doors. Any other capital letter is accepted by the format, but it
ends the key list of its line. The whole file is checked before anything runs.
Each line that does not follow this form is reported with its line number, and
the run is refused. An empty file is refused as well.

## Using it as a library

The parts of the program can be used on their own:

```python
from cubraycast.loader import load_scene
from cubraycast.world import World
from cubraycast.render import cast_ray

scene = load_scene("maps/example.cub")
world = World.from_lines(scene.map_lines)
hit = cast_ray(world, 0.0)
print(hit.distance, hit.side)
```

* `cubraycast.config`: `read_scene_file`, `parse_header`, `parse_color` and
  `parse_texture_path` read scene files. They raise `ConfigError`, whose
  `code` attribute holds the exit status.
* `cubraycast.mapcheck`: `check_map` and `check_closed` validate map lines.
* `cubraycast.loader`: `load_scene` reads a scene file and validates it in
  full. It returns a `Scene`.
* `cubraycast.world`: `World` holds the tile grid and the `Player`. Its
  methods are `move`, `rotate`, `rotate_by`, `mouse_look` and `use_door`.
* `cubraycast.render`: `Renderer.render` draws a frame as a NumPy array of
  packed RGBA values. `cast_ray` and `texture_column` are the ray-casting
  steps it uses.
* `cubraycast.tas`: `parse_tas` and `read_tas_file` turn replay text into a
  list of `TasStep`. On bad input they raise `TasFormatError`.
* `cubraycast.app`: `Game` runs the loop. `Game.update` advances a single
  frame without opening a window.