from dualframe import DualQuaternion, multiply, transform_point, f4g
import numpy as np
import timeit

if __name__ == "__main__":
    axis = np.array([0.0, 0.0, 1.0])
    point = np.array([300.0, 0.0, 0.0])
    translation = np.array([650.0, 0.0, 318.0])

    r = DualQuaternion.from_rotation(0.5, axis, point)
    t = DualQuaternion.from_translation(translation)
    r * t  # warmup

    N = 100_000
    print("creation: ", timeit.timeit(lambda: DualQuaternion(), number=N))
    print("from rotation: ", timeit.timeit(
        lambda: DualQuaternion.from_rotation(0.5, axis, point), number=N))
    print("from translation: ", timeit.timeit(
        lambda: DualQuaternion.from_translation(translation), number=N))

    print("multiply operator: ", timeit.timeit(lambda: r * t, number=N))
    print("multiply chain of 5: ", timeit.timeit(
        lambda: multiply(r, r, r, t, t), number=N))
    print("f4g: ", timeit.timeit(
        lambda: f4g(DualQuaternion.ORIGIN_POINT, r * t), number=N))
    print("transform point: ", timeit.timeit(
        lambda: transform_point(point, r, rounded=True), number=N))
    print("to matrix: ", timeit.timeit(lambda: r.to_matrix(), number=N))
    print("inverse: ", timeit.timeit(lambda: r.inverse(), number=N))
