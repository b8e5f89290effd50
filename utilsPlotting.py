'''
    ---------------------------------------------------------------------------
    Knee simulations: utilsPlotting.py
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
import matplotlib.pyplot as plt

from utilsControls import sample_control_functions

def _get_grid(nAxs):
    nCol = int(np.ceil(np.sqrt(nAxs)))
    nRow = int(np.ceil(nAxs / nCol))

    return nRow, nCol

def _finish(fig, savePath, show):
    if savePath is not None:
        fig.savefig(savePath)
    # Show plot (needed if running through terminal).
    if show:
        plt.show()

def plot_dataframe(dataframes, x='time', y=[], xlabel=None, ylabel=None,
                   labels=None, title=None, xrange=None, savePath=None,
                   show=True):
    """Plots columns of one or more dataframes (e.g., states, force reporter
    results) against x, one subplot per column. Returns the figure.
    """

    if not y:
        y = [c for c in dataframes[0].columns if c != x]
    if not y:
        raise ValueError('No columns to plot.')
    if not xlabel:
        xlabel = x

    # Labels for legend.
    if not labels:
        labels = ['dataframe_' + str(i) for i in range(len(dataframes))]
    elif len(labels) != len(dataframes):
        print("WARNING: The number of labels ({}) does not match the number of input dataframes ({})".format(len(labels), len(dataframes)))
        labels = ['dataframe_' + str(i) for i in range(len(dataframes))]

    nAxs = len(y)
    nRow, nCol = _get_grid(nAxs)
    fig, axs = plt.subplots(nRow, nCol, sharex=True, squeeze=False)
    colors = plt.cm.rainbow(np.linspace(0, 1, len(dataframes)))
    for i, ax in enumerate(axs.flat):
        if i >= nAxs:
            # Hide empty subplots.
            ax.set_visible(False)
            continue
        for c, dataframe in enumerate(dataframes):
            ax.plot(dataframe[x], dataframe[y[i]], c=colors[c],
                    label=labels[c])
        if nAxs > 1:
            ax.set_title(y[i])
        if xrange is not None:
            ax.set_xlim(xrange)

    # Axis labels and legend.
    plt.setp(axs[-1, :], xlabel=xlabel)
    if ylabel:
        plt.setp(axs[:, 0], ylabel=ylabel)
    elif nAxs == 1:
        axs[0, 0].set_ylabel(y[0])
    axs[0, 0].legend()
    if title:
        fig.suptitle(title)
    fig.align_ylabels()

    _finish(fig, savePath, show)

    return fig

def plot_excitations(phases, values, duration, names=None, step=0.001,
                     title='Excitations', savePath=None, show=True):

    times, data = sample_control_functions(phases, values, duration, step)
    if names is None:
        names = ['actuator_' + str(i) for i in range(data.shape[1])]

    fig, ax = plt.subplots()
    colors = plt.cm.rainbow(np.linspace(0, 1, data.shape[1]))
    for i, name in enumerate(names):
        ax.plot(times, data[:, i], c=colors[i], label=name)
    # Phase points.
    ax.plot(phases, np.atleast_2d(values).T, 'k.', markersize=3)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Excitation (-)')
    ax.set_title(title)
    if len(names) <= 12:
        ax.legend(fontsize='small')

    _finish(fig, savePath, show)

    return fig
