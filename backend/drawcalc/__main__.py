from drawcalc.main import run

run()
