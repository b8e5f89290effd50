'''
    ---------------------------------------------------------------------------
    Knee simulations: utilsControls.py
    ---------------------------------------------------------------------------

    Copyright 2022 the Authors

    Licensed under the Apache License, Version 2.0 (the "License"); you may not
    use this file except in compliance with the License. You may obtain a copy
    of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.
'''

import numpy as np

nPhases = 9

# %% Excitation phases.
def get_excitation_phases(angle, t_eq=0.0):
    """Returns the time points of the excitation control functions and the
    duration of the excitation pattern.

    Parameters
    ----------
    angle : float
        Target knee angle (rad).
    t_eq : float, optional
        Time shift applied to all phases.

    Returns
    -------
    phases : np.ndarray
        The nPhases time points (s). The first three points coincide when
        t_eq is 0, so the functions jump at t = 0.
    duration : float
        End of the last phase (s).
    """

    dur_xc = (25.0 + 0.2 * angle) / 1000.
    t_fix = (99.0 + 0.5 * angle) / 1000.

    phases = np.array([
        -t_eq,
        0,
        0,
        dur_xc,
        dur_xc * 1.05,
        t_fix,
        t_fix + 0.005,
        t_fix + 0.010,
        t_fix * 2])
    phases += t_eq
    duration = t_eq + t_fix * 2

    return phases, duration

# %% Excitation values.
def get_excitation_values(so_activ_init, so_activ_final):
    # Accepts scalars (one actuator) or vectors (one row per actuator).
    init = np.asarray(so_activ_init, dtype=float)
    final = np.asarray(so_activ_final, dtype=float)
    if init.shape != final.shape:
        raise ValueError('Initial and final activations differ in size.')
    dssa = final - init

    values = np.stack([
        init,
        init,
        final + dssa * 0.75,
        final + dssa * 0.75,
        init + dssa * 0.975,
        init + dssa * 0.975,
        init + dssa * 1.350,
        final,
        final], axis=-1)

    return values

# %% Piecewise linear functions.
def evaluate_piecewise_linear(phases, values, times):
    phases = np.asarray(phases, dtype=float)
    values = np.asarray(values, dtype=float)
    times = np.atleast_1d(np.asarray(times, dtype=float))
    if phases.shape[0] != values.shape[-1]:
        raise ValueError('Number of phases and values differ.')

    # Index of the first phase strictly after t: at repeated inner phases the
    # value after the jump is returned.
    idx = np.searchsorted(phases, times, side='right')
    idx = np.clip(idx, 1, phases.shape[0] - 1)
    t0, t1 = phases[idx - 1], phases[idx]
    v0, v1 = values[..., idx - 1], values[..., idx]
    dt = t1 - t0
    with np.errstate(divide='ignore', invalid='ignore'):
        w = np.where(dt > 0, (times - t0) / dt, 1.0)
    w = np.clip(w, 0.0, 1.0)
    out = v0 + w * (v1 - v0)

    # Constant extrapolation. The first value holds up to and including the
    # first phase, as in OpenSim's PiecewiseLinearFunction.
    out = np.where(times <= phases[0], values[..., :1], out)
    out = np.where(times >= phases[-1], values[..., -1:], out)

    return out

def get_sample_times(duration, step=0.001):
    nSteps = int(np.round(duration / step))

    return np.arange(nSteps + 1) * step

def sample_control_functions(phases, values, duration, step=0.001):
    times = get_sample_times(duration, step)
    data = evaluate_piecewise_linear(phases, np.atleast_2d(values), times)

    return times, data.T

# %% Control log.
def sort_and_deduplicate_control_log(times, controls):
    """Sorts a control log by time and drops every sample whose time is not
    strictly greater than the time of the last sample kept.
    """
    times = np.asarray(times, dtype=float)
    controls = np.asarray(controls, dtype=float)
    if times.shape[0] != controls.shape[0]:
        raise ValueError('Control log times and controls differ in length.')
    if times.shape[0] == 0:
        return times, controls

    index = np.argsort(times, kind='stable')
    times = times[index]
    controls = controls[index]

    keep = [0]
    for i in range(1, times.shape[0]):
        if times[i] > times[keep[-1]]:
            keep.append(i)

    return times[keep], controls[keep]
