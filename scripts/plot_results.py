import json
import sys
import matplotlib.pyplot as plt


def load_log(path):
    with open(path, "r") as f:
        return json.load(f)


def main(log_path="logs/sim.json"):
    data = load_log(log_path)
    ts = [entry["t"] for entry in data]
    outstanding = [len(entry["missions"]) for entry in data]
    completed = [entry.get("completed", 0) for entry in data]
    duplicates = [entry["metrics"]["duplicate_claims"] for entry in data]

    fig, (ax0, ax1) = plt.subplots(2, 1, sharex=True)
    ax0.plot(ts, outstanding, label="outstanding")
    ax0.plot(ts, completed, label="completed")
    ax0.set_ylabel("missions")
    ax0.legend()
    ax1.step(ts, duplicates, where="post")
    ax1.set_xlabel("time (s)")
    ax1.set_ylabel("duplicate claims")
    fig.suptitle("Mission allocation over time")
    plt.show()


if __name__ == "__main__":
    log = sys.argv[1] if len(sys.argv) > 1 else "logs/sim.json"
    main(log)
